# File: tests/conftest.py
import asyncio
from typing import Dict, Iterable, List, Optional

import pytest
import pytest_asyncio
from aiohttp import web
from aiohttp.test_utils import TestServer

from marketing_scout.config import CrawlerConfig
from marketing_scout.crawler.models import PageData
from marketing_scout.errors import FetchError


def pytest_configure(config):
    """Register custom markers so that `--strict-markers` does not fail."""
    config.addinivalue_line(
        "markers",
        "slow: marks tests as slow (deselect with '-m \"not slow\"')",
    )


class FakeSite:
    """In-memory fetch collaborator: URL -> HTML, with optional failures and redirects."""

    def __init__(
        self,
        pages: Dict[str, str],
        failing: Iterable[str] = (),
        redirects: Optional[Dict[str, str]] = None,
        delay: float = 0.0,
    ) -> None:
        self.pages = pages
        self.failing = set(failing)
        self.redirects = redirects or {}
        self.delay = delay
        self.calls: List[str] = []

    async def fetch(self, url: str) -> PageData:
        self.calls.append(url)
        if self.delay:
            await asyncio.sleep(self.delay)
        if url in self.failing:
            raise FetchError(url, "connection reset")
        final = self.redirects.get(url, url)
        if final not in self.pages:
            raise FetchError(url, "HTTP 404")
        return PageData(final, self.pages[final])


def links(*hrefs: str) -> str:
    return "<html><body>" + "".join(f'<a href="{h}">{h}</a>' for h in hrefs) + "</body></html>"


@pytest.fixture()
def make_site():
    return FakeSite


@pytest.fixture()
def html_links():
    return links


@pytest.fixture()
def basic_config() -> CrawlerConfig:
    """
    Return a small, fast CrawlerConfig for dispatcher tests.
    """
    return CrawlerConfig(
        seed_urls=["https://a.test/"],
        allowed_domains=["a.test"],
        concurrency=4,
        per_host_parallelism=4,
        per_host_delay=0.0,
        timeout=2.0,
        retry_times=0,
    )


@pytest_asyncio.fixture
async def serve():
    """Start aiohttp apps on free local ports; yields a function returning the base URL."""
    servers: List[TestServer] = []

    async def _serve(app: web.Application) -> str:
        server = TestServer(app)
        await server.start_server()
        servers.append(server)
        return str(server.make_url("/")).rstrip("/")

    yield _serve
    for server in servers:
        await server.close()
