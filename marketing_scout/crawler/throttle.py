# marketing_scout/crawler/throttle.py
"""
Per-host politeness: bounded parallelism and a minimum delay between requests.
"""
from __future__ import annotations

import asyncio
import time
from contextlib import asynccontextmanager
from typing import AsyncIterator, Dict

__all__ = ("HostThrottle",)


class HostThrottle:
    """
    Limits fetches per host independently of the global worker pool.

    At most ``parallelism`` requests to one host run at a time, and two
    request starts on the same host are at least ``delay`` seconds apart.
    """

    def __init__(self, parallelism: int, delay: float) -> None:
        if parallelism < 1:
            raise ValueError("parallelism must be >= 1")
        if delay < 0:
            raise ValueError("delay must be >= 0")
        self.parallelism = parallelism
        self.delay = delay
        self._slots: Dict[str, asyncio.Semaphore] = {}
        self._turns: Dict[str, asyncio.Lock] = {}
        self._last_start: Dict[str, float] = {}

    @asynccontextmanager
    async def slot(self, host: str) -> AsyncIterator[None]:
        sem = self._slots.setdefault(host, asyncio.Semaphore(self.parallelism))
        async with sem:
            await self._wait_turn(host)
            yield

    async def _wait_turn(self, host: str) -> None:
        if self.delay <= 0:
            return
        turn = self._turns.setdefault(host, asyncio.Lock())
        async with turn:
            last = self._last_start.get(host)
            if last is not None:
                wait = self.delay - (time.monotonic() - last)
                if wait > 0:
                    await asyncio.sleep(wait)
            self._last_start[host] = time.monotonic()
