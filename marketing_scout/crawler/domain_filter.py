# marketing_scout/crawler/domain_filter.py
"""
Allow-list check for crawl scope.

Permissive mode (default) accepts any host that *contains* an allow-list entry,
so ``blog.example.com`` passes for ``example.com`` but so does
``notexample.com``. Strict mode only accepts the entry itself and its
subdomains.
"""
from __future__ import annotations

from typing import Iterable, Tuple

from marketing_scout.crawler.normalizer import host_of

__all__ = ("DomainFilter", "is_allowed")


def _host_matches(host: str, entry: str, strict: bool) -> bool:
    if strict:
        return host == entry or host.endswith("." + entry)
    return entry in host


def is_allowed(url: str, allow_list: Iterable[str], strict: bool = False) -> bool:
    """Return True if the hostname of *url* matches at least one allow-list entry."""
    host = host_of(url).lower()
    if not host:
        return False
    return any(_host_matches(host, entry.strip().lower(), strict) for entry in allow_list if entry.strip())


class DomainFilter:
    """Allow-list bound once at start-up; read-only afterwards."""

    def __init__(self, allow_list: Iterable[str], strict: bool = False) -> None:
        self.allow_list: Tuple[str, ...] = tuple(e.strip().lower() for e in allow_list if e.strip())
        self.strict = strict

    def is_allowed(self, url: str) -> bool:
        return is_allowed(url, self.allow_list, self.strict)

    __call__ = is_allowed
