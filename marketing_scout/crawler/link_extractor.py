# marketing_scout/crawler/link_extractor.py
"""
Raw link extraction from fetched pages.
"""
from __future__ import annotations

from typing import List

from bs4 import BeautifulSoup
from bs4.element import Tag

from marketing_scout.crawler.models import PageData


def extract_links(page: PageData) -> List[str]:
    """
    Return the raw ``href`` values of every ``<a href>`` on the page, in
    document order. Resolution and filtering happen later in the pipeline.
    """
    if not page.content:
        return []
    soup = BeautifulSoup(page.content, "html.parser")
    links: List[str] = []
    for tag in soup.find_all("a", href=True):
        if not isinstance(tag, Tag):
            continue
        href_val = tag.get("href")
        if not isinstance(href_val, str):
            continue
        raw = href_val.strip()
        if raw:
            links.append(raw)
    return links
