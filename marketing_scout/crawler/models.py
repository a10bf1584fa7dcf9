# marketing_scout/crawler/models.py
"""
Data models for the MarketingScout crawler.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict


@dataclass(slots=True)
class PageData:
    """Holds the final URL (after redirects) and HTML content of a fetched page."""

    url: str
    content: str


@dataclass(frozen=True, slots=True)
class DiscoveredLink:
    """An outbound link resolved against the page it was found on."""

    absolute_url: str
    source_page: str


@dataclass(frozen=True, slots=True)
class MatchRecord:
    """A URL judged relevant to marketing, with where and when it was found."""

    url: str
    source_host: str
    found_on_page: str
    timestamp: str

    def to_dict(self) -> Dict[str, str]:
        return {
            "url": self.url,
            "source": self.source_host,
            "found_on_page": self.found_on_page,
            "timestamp": self.timestamp,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> MatchRecord:
        return cls(
            url=data["url"],
            source_host=data["source"],
            found_on_page=data["found_on_page"],
            timestamp=data["timestamp"],
        )
