# marketing_scout/crawler/classifier.py
"""
Relevance classification of discovered URLs.

Two independent predicates are computed for every URL:

* ``relevant``   - keyword match and not a document asset (.pdf, .zip, ...);
  decides whether the URL is recorded.
* ``followable`` - not a static asset (.css, .js, images); decides whether the
  URL is queued for fetching, regardless of keywords.

The dispatcher only depends on :class:`LinkClassifier`, so the keyword
strategy can be replaced by anything with a ``classify(url)`` method.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable, Protocol, Tuple
from urllib.parse import urlsplit

__all__ = (
    "DEFAULT_KEYWORDS",
    "DEFAULT_RECORD_EXCLUSIONS",
    "DEFAULT_TRAVERSAL_EXCLUSIONS",
    "Classification",
    "LinkClassifier",
    "KeywordClassifier",
    "classify",
)

DEFAULT_KEYWORDS: Tuple[str, ...] = (
    "marketing",
    "blog",
    "content",
    "digital",
    "seo",
    "sem",
    "social",
    "inbound",
    "outbound",
    "growth",
    "strategy",
    "conversion",
    "branding",
)
DEFAULT_RECORD_EXCLUSIONS: Tuple[str, ...] = (".pdf", ".zip", ".doc", ".docx")
DEFAULT_TRAVERSAL_EXCLUSIONS: Tuple[str, ...] = (".css", ".js", ".png", ".jpg", ".gif")


@dataclass(frozen=True, slots=True)
class Classification:
    """Outcome of classifying one URL."""

    relevant: bool
    followable: bool


class LinkClassifier(Protocol):
    def classify(self, url: str) -> Classification: ...


def _path_of(url: str) -> str:
    try:
        return urlsplit(url).path.lower()
    except ValueError:
        return url.lower()


class KeywordClassifier:
    """Regex keyword match plus file-extension exclusions. Stateless."""

    def __init__(
        self,
        keywords: Iterable[str] = DEFAULT_KEYWORDS,
        record_exclusions: Iterable[str] = DEFAULT_RECORD_EXCLUSIONS,
        traversal_exclusions: Iterable[str] = DEFAULT_TRAVERSAL_EXCLUSIONS,
    ) -> None:
        words = [k.strip() for k in keywords if k.strip()]
        if not words:
            raise ValueError("at least one keyword is required")
        self.pattern = re.compile("|".join(re.escape(w) for w in words), re.IGNORECASE)
        self.record_exclusions = tuple(e.lower() for e in record_exclusions)
        self.traversal_exclusions = tuple(e.lower() for e in traversal_exclusions)

    def is_match(self, url: str) -> bool:
        return self.pattern.search(url) is not None

    def is_document(self, url: str) -> bool:
        return _path_of(url).endswith(self.record_exclusions)

    def is_static_asset(self, url: str) -> bool:
        return _path_of(url).endswith(self.traversal_exclusions)

    def classify(self, url: str) -> Classification:
        return Classification(
            relevant=self.is_match(url) and not self.is_document(url),
            followable=not self.is_static_asset(url),
        )


_default = KeywordClassifier()


def classify(url: str) -> Classification:
    """Classify *url* with the default keyword set and exclusions."""
    return _default.classify(url)
