# File: marketing_scout/aggregator.py
"""marketing_scout.aggregator: Потокобезопасный сборщик найденных маркетинговых URL."""

from __future__ import annotations

import threading
from datetime import datetime, timezone
from typing import List, Optional

from marketing_scout.crawler.models import MatchRecord
from marketing_scout.crawler.normalizer import host_of

__all__ = ["ResultAggregator", "make_record", "rfc3339_now"]


def rfc3339_now() -> str:
    """Текущее время в формате RFC 3339 (UTC, с точностью до секунд)."""
    return datetime.now(timezone.utc).isoformat(timespec="seconds")


def make_record(url: str, found_on_page: str, timestamp: Optional[str] = None) -> MatchRecord:
    """Создаёт MatchRecord: хост источника берётся из адреса страницы."""
    return MatchRecord(
        url=url,
        source_host=host_of(found_on_page),
        found_on_page=found_on_page,
        timestamp=timestamp or rfc3339_now(),
    )


class ResultAggregator:
    """Упорядоченная коллекция MatchRecord с атомарным добавлением.

    Порядок совпадает с порядком вызовов ``record``. Снимок, взятый до
    завершения обхода, корректен, но неполон; сохранять его нельзя.
    """

    def __init__(self) -> None:
        self._records: List[MatchRecord] = []
        self._lock = threading.Lock()

    def record(self, entry: MatchRecord) -> None:
        with self._lock:
            self._records.append(entry)

    def snapshot(self) -> List[MatchRecord]:
        """Возвращает копию текущего списка записей."""
        with self._lock:
            return list(self._records)

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)
