# File: marketing_scout/engine.py
"""marketing_scout.engine: Orchestration layer для запуска обхода с реальным HTTP-фетчером."""

from __future__ import annotations

import asyncio
from typing import List, Optional

from marketing_scout.config import CrawlerConfig
from marketing_scout.crawler.dispatcher import CrawlDispatcher
from marketing_scout.crawler.fetcher import Fetcher
from marketing_scout.crawler.models import MatchRecord
from marketing_scout.logger import logger

__all__ = ["start_crawl"]


async def start_crawl(cfg: CrawlerConfig, *, stop_after: Optional[float] = None) -> List[MatchRecord]:
    """
    Запускает обход в контексте Fetcher и возвращает найденные MatchRecord.

    Parameters
    ----------
    cfg : CrawlerConfig
        Конфигурация обхода.
    stop_after : float, optional
        Через сколько секунд попросить диспетчер остановиться. Очередь
        дочищается без новых загрузок, уже найденное возвращается.
    """
    async with Fetcher(cfg) as fetcher:
        dispatcher = CrawlDispatcher(cfg, fetcher.fetch)
        timer = None
        if stop_after is not None:
            logger.info("Crawl will stop after %.1f s", stop_after)
            timer = asyncio.get_running_loop().call_later(stop_after, dispatcher.stop)
        try:
            return await dispatcher.run()
        finally:
            if timer is not None:
                timer.cancel()
