# marketing_scout/crawler/dispatcher.py
"""
Crawl dispatcher: the frontier, the worker pool and the per-link pipeline.

Every link found on a fetched page goes through

    normalize -> dedup gate -> domain gate -> classify -> record? -> enqueue?

and ends in exactly one :class:`LinkState`. Rejections are final. The crawl is
finished when the frontier queue is joined: every enqueued URL reached a
terminal state and no fetch is in flight.
"""
from __future__ import annotations

import asyncio
import time
from collections import Counter
from dataclasses import dataclass, field
from enum import Enum
from typing import Awaitable, Callable, Iterable, List, Optional

from marketing_scout.aggregator import ResultAggregator, make_record
from marketing_scout.config import CrawlerConfig
from marketing_scout.crawler.classifier import KeywordClassifier, LinkClassifier
from marketing_scout.crawler.dedup import SeenSet
from marketing_scout.crawler.domain_filter import DomainFilter
from marketing_scout.crawler.link_extractor import extract_links
from marketing_scout.crawler.models import DiscoveredLink, MatchRecord, PageData
from marketing_scout.crawler.normalizer import host_of, normalize
from marketing_scout.crawler.throttle import HostThrottle
from marketing_scout.errors import FetchError, ParseError
from marketing_scout.logger import logger

__all__ = ("LinkState", "LinkDecision", "CrawlStats", "CrawlDispatcher", "FetchFn")

FetchFn = Callable[[str], Awaitable[PageData]]


class LinkState(Enum):
    """Terminal state of one discovered link."""

    CANCELLED = "cancelled"
    PARSE_ERROR = "parse_error"
    DUPLICATE = "duplicate"
    OUT_OF_SCOPE = "out_of_scope"
    CLASSIFIED = "classified"


@dataclass(frozen=True, slots=True)
class LinkDecision:
    state: LinkState
    url: Optional[str] = None
    recorded: bool = False
    enqueue: bool = False


@dataclass(slots=True)
class CrawlStats:
    fetched: int = 0
    failed: int = 0
    links: Counter = field(default_factory=Counter)

    @property
    def recorded(self) -> int:
        return self.links["recorded"]

    @property
    def enqueued(self) -> int:
        return self.links["enqueued"]


class CrawlDispatcher:
    """Runs a crawl for one configuration and collects the marketing matches."""

    def __init__(
        self,
        config: CrawlerConfig,
        fetch: FetchFn,
        *,
        classifier: Optional[LinkClassifier] = None,
        seen: Optional[SeenSet] = None,
        results: Optional[ResultAggregator] = None,
    ) -> None:
        self.config = config
        self._fetch = fetch
        self.classifier: LinkClassifier = classifier or KeywordClassifier(
            config.keywords, config.record_exclusions, config.traversal_exclusions
        )
        self.domains = DomainFilter(config.allowed_domains, strict=config.strict_domains)
        self.seen = seen if seen is not None else SeenSet()
        self.results = results if results is not None else ResultAggregator()
        self.throttle = HostThrottle(config.per_host_parallelism, config.per_host_delay)
        self.stats = CrawlStats()
        self._stopped = False
        self._budget_spent = False
        self._dispatched = 0

    # ------------------------------------------------------------------ #
    # Cancellation                                                       #
    # ------------------------------------------------------------------ #

    def stop(self) -> None:
        """Ask the crawl to wind down: no new fetches, no new pipeline runs."""
        if not self._stopped:
            logger.info("Stop requested, draining frontier")
        self._stopped = True

    @property
    def stopped(self) -> bool:
        return self._stopped

    @property
    def budget_spent(self) -> bool:
        """True once max_pages fetches were dispatched; pages already in flight still run the pipeline."""
        return self._budget_spent

    # ------------------------------------------------------------------ #
    # Link pipeline                                                      #
    # ------------------------------------------------------------------ #

    def process_link(self, raw_href: str, page_url: str) -> LinkDecision:
        """Run one raw link from *page_url* through the pipeline."""
        if self._stopped:
            return LinkDecision(LinkState.CANCELLED)
        try:
            link = DiscoveredLink(normalize(raw_href, page_url), page_url)
        except ParseError as exc:
            logger.debug("Skip link on %s: %s", page_url, exc)
            return LinkDecision(LinkState.PARSE_ERROR)

        url = link.absolute_url
        if not self.seen.try_mark(url):
            return LinkDecision(LinkState.DUPLICATE, url)
        if not self.domains.is_allowed(url):
            return LinkDecision(LinkState.OUT_OF_SCOPE, url)

        verdict = self.classifier.classify(url)
        if verdict.relevant:
            self.results.record(make_record(url, link.source_page))
            logger.debug("Marketing URL: %s (on %s)", url, link.source_page)
        return LinkDecision(LinkState.CLASSIFIED, url, recorded=verdict.relevant, enqueue=verdict.followable)

    # ------------------------------------------------------------------ #
    # Frontier & workers                                                 #
    # ------------------------------------------------------------------ #

    def _seed(self, seeds: Iterable[str], queue: asyncio.Queue[str]) -> None:
        for raw in seeds:
            try:
                url = normalize(raw, raw)
            except ParseError as exc:
                logger.warning("Invalid seed skipped: %s", exc)
                continue
            if not self.domains.is_allowed(url):
                logger.warning("Seed outside allowed domains skipped: %s", url)
                continue
            if self.seen.try_mark(url):
                queue.put_nowait(url)

    async def run(self, seeds: Optional[Iterable[str]] = None) -> List[MatchRecord]:
        """Crawl from *seeds* (default: configured seeds) until the frontier is empty."""
        start = time.monotonic()
        queue: asyncio.Queue[str] = asyncio.Queue()
        self._seed(self.config.seed_urls if seeds is None else seeds, queue)
        logger.info("Старт обхода: %d seed URL, %d воркеров", queue.qsize(), self.config.concurrency)

        workers = [asyncio.create_task(self._worker(queue)) for _ in range(self.config.concurrency)]
        try:
            await queue.join()
        finally:
            for w in workers:
                w.cancel()
            await asyncio.gather(*workers, return_exceptions=True)

        duration = time.monotonic() - start
        logger.info(
            "Завершено: %d страниц (%d ошибок), %d маркетинговых URL за %.2f с",
            self.stats.fetched,
            self.stats.failed,
            len(self.results),
            duration,
        )
        logger.debug("Link outcomes: %s", dict(self.stats.links))
        return self.results.snapshot()

    async def _worker(self, queue: asyncio.Queue[str]) -> None:
        while True:
            url = await queue.get()
            try:
                if self._stopped:
                    continue
                page = await self._fetch_page(url)
                if page is None or not self._accept_final_url(url, page):
                    continue
                for href in extract_links(page):
                    decision = self.process_link(href, page.url)
                    self._count(decision)
                    if decision.enqueue and decision.url is not None:
                        queue.put_nowait(decision.url)
            except Exception:
                self.stats.failed += 1
                logger.exception("Unexpected error while processing %s", url)
            finally:
                queue.task_done()

    async def _fetch_page(self, url: str) -> Optional[PageData]:
        if self._budget_spent:
            return None
        if self.config.max_pages is not None and self._dispatched >= self.config.max_pages:
            self._budget_spent = True
            logger.info("Page limit of %d reached, no more fetches", self.config.max_pages)
            return None
        self._dispatched += 1
        async with self.throttle.slot(host_of(url)):
            if self._stopped:
                return None
            logger.info("Visiting: %s", url)
            try:
                page = await self._fetch(url)
            except FetchError as exc:
                self.stats.failed += 1
                logger.warning("Error when visiting: %s", exc)
                return None
        self.stats.fetched += 1
        return page

    def _accept_final_url(self, url: str, page: PageData) -> bool:
        """Mark a redirect target as seen; reject it when it left the allowed domains."""
        if page.url == url:
            return True
        try:
            final = normalize(page.url, page.url)
        except ParseError as exc:
            logger.warning("Redirect from %s to an invalid URL: %s", url, exc)
            return False
        if not self.domains.is_allowed(final):
            logger.info("Redirect outside allowed domains skipped: %s -> %s", url, final)
            return False
        self.seen.try_mark(final)
        return True

    def _count(self, decision: LinkDecision) -> None:
        self.stats.links[decision.state.value] += 1
        if decision.recorded:
            self.stats.links["recorded"] += 1
        if decision.enqueue:
            self.stats.links["enqueued"] += 1
