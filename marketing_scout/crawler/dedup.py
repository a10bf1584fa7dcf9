# marketing_scout/crawler/dedup.py
"""
Dedup store: the set of absolute URLs the crawler has already seen.
"""
from __future__ import annotations

import threading
from typing import Set

__all__ = ("SeenSet",)


class SeenSet:
    """Thread-safe, grow-only set of URLs with an atomic check-and-set."""

    def __init__(self) -> None:
        self._urls: Set[str] = set()
        self._lock = threading.Lock()

    def try_mark(self, url: str) -> bool:
        """
        Mark *url* as seen.

        Returns True only for the caller that moved the URL from absent to
        present; every later (or concurrent losing) caller gets False.
        """
        with self._lock:
            if url in self._urls:
                return False
            self._urls.add(url)
            return True

    def __contains__(self, url: object) -> bool:
        with self._lock:
            return url in self._urls

    def __len__(self) -> int:
        with self._lock:
            return len(self._urls)
