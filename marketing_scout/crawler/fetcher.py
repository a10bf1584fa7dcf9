# marketing_scout/crawler/fetcher.py
"""
Fetcher module: HTTP GET with timeout, retry/backoff and redirect following.
"""
from __future__ import annotations

import asyncio
from typing import Optional, Sequence

from aiohttp import ClientError, ClientSession, ClientTimeout

from marketing_scout.config import CrawlerConfig
from marketing_scout.crawler.models import PageData
from marketing_scout.errors import FetchError
from marketing_scout.logger import logger


class Fetcher:
    """
    Owns an aiohttp session; ``fetch`` is the crawl dispatcher's fetch collaborator.

    Usage::

        async with Fetcher(config) as fetcher:
            page = await fetcher.fetch("https://moz.com/blog")
    """

    _RETRY_STATUS: Sequence[int] = tuple(range(500, 600)) + (429,)

    def __init__(self, config: CrawlerConfig, *, backoff: float = 1.0) -> None:
        self.config = config
        self.retry_times = config.retry_times
        self.backoff = backoff
        self.session: Optional[ClientSession] = None

    async def __aenter__(self) -> Fetcher:
        self.session = ClientSession(
            timeout=ClientTimeout(total=self.config.timeout),
            headers={"User-Agent": self.config.user_agent},
            raise_for_status=False,
        )
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        if self.session and not self.session.closed:
            await self.session.close()

    async def fetch(self, url: str) -> PageData:
        """
        Fetch *url* and return PageData with the final URL after redirects.

        Non-HTML responses come back with empty content. Raises FetchError for
        4xx statuses, timeouts and transport errors once retries are spent.
        """
        if not self.session:
            raise RuntimeError("Session not initialized")

        attempts = 0
        while True:
            try:
                async with self.session.get(url, allow_redirects=True) as resp:
                    if resp.status in self._RETRY_STATUS:
                        raise ClientError(f"retryable status {resp.status}")
                    if resp.status >= 400:
                        raise FetchError(url, f"HTTP {resp.status}")
                    final_url = str(resp.url)
                    ctype = resp.headers.get("Content-Type", "").lower()
                    if "html" not in ctype:
                        return PageData(final_url, "")
                    text = await resp.text(errors="replace")
                    return PageData(final_url, text)
            except asyncio.TimeoutError as exc:
                # no retry on timeout
                raise FetchError(url, "timeout") from exc
            except ClientError as exc:
                attempts += 1
                if attempts > self.retry_times:
                    raise FetchError(url, str(exc) or type(exc).__name__) from exc
                delay = min(self.backoff * 2**attempts, 60)
                logger.debug("Retry %d/%d for %s after %.2f s", attempts, self.retry_times, url, delay)
                await asyncio.sleep(delay)
