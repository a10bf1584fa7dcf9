# File: tests/test_dispatcher.py
from __future__ import annotations

import asyncio
import time
from collections import Counter

import pytest

from marketing_scout.crawler.classifier import Classification
from marketing_scout.crawler.dispatcher import CrawlDispatcher, LinkState
from marketing_scout.crawler.models import PageData


# --------------------------------------------------------------------------- #
#                              Link pipeline                                  #
# --------------------------------------------------------------------------- #


def test_process_link_terminal_states(basic_config, make_site):
    dispatcher = CrawlDispatcher(basic_config, make_site({}).fetch)
    page = "https://a.test/"

    assert dispatcher.process_link("mailto:x@a.test", page).state is LinkState.PARSE_ERROR

    first = dispatcher.process_link("/blog/post1", page)
    assert first.state is LinkState.CLASSIFIED
    assert first.url == "https://a.test/blog/post1"
    assert first.recorded and first.enqueue

    again = dispatcher.process_link("https://A.test/blog/post1#comments", page)
    assert again.state is LinkState.DUPLICATE
    assert not again.recorded and not again.enqueue

    away = dispatcher.process_link("https://other.test/marketing", page)
    assert away.state is LinkState.OUT_OF_SCOPE
    assert not away.recorded and not away.enqueue

    plain = dispatcher.process_link("/about", page)
    assert plain.state is LinkState.CLASSIFIED
    assert not plain.recorded and plain.enqueue

    assert [r.url for r in dispatcher.results.snapshot()] == ["https://a.test/blog/post1"]


def test_parse_error_leaves_state_untouched(basic_config, make_site):
    dispatcher = CrawlDispatcher(basic_config, make_site({}).fetch)
    dispatcher.process_link("javascript:void(0)", "https://a.test/")
    assert len(dispatcher.seen) == 0
    assert len(dispatcher.results) == 0


def test_out_of_scope_is_final(basic_config, make_site):
    dispatcher = CrawlDispatcher(basic_config, make_site({}).fetch)
    assert dispatcher.process_link("https://other.test/seo", "https://a.test/").state is LinkState.OUT_OF_SCOPE
    assert dispatcher.process_link("https://other.test/seo", "https://a.test/").state is LinkState.DUPLICATE


def test_stopped_pipeline_is_cancelled(basic_config, make_site):
    dispatcher = CrawlDispatcher(basic_config, make_site({}).fetch)
    dispatcher.stop()
    assert dispatcher.process_link("/blog/x", "https://a.test/").state is LinkState.CANCELLED
    assert len(dispatcher.seen) == 0


def test_strict_domains_from_config(basic_config, make_site):
    cfg = basic_config.model_copy(update={"strict_domains": True})
    dispatcher = CrawlDispatcher(cfg, make_site({}).fetch)
    assert dispatcher.process_link("https://nota.test/blog", "https://a.test/").state is LinkState.OUT_OF_SCOPE
    assert dispatcher.process_link("https://www.a.test/blog", "https://a.test/").state is LinkState.CLASSIFIED


# --------------------------------------------------------------------------- #
#                              Full crawls                                    #
# --------------------------------------------------------------------------- #


@pytest.mark.asyncio()
async def test_end_to_end_single_match(basic_config, make_site, html_links):
    site = make_site(
        {
            "https://a.test/": html_links("/blog/post1", "/about.pdf", "https://other.test/marketing"),
            "https://a.test/blog/post1": "<h1>Post</h1>",
        }
    )
    dispatcher = CrawlDispatcher(basic_config, site.fetch)
    records = await dispatcher.run()

    assert [r.url for r in records] == ["https://a.test/blog/post1"]
    assert records[0].source_host == "a.test"
    assert records[0].found_on_page == "https://a.test/"
    assert "https://other.test/marketing" not in site.calls
    assert dispatcher.stats.fetched == 2
    assert dispatcher.stats.failed == 1  # /about.pdf is not served


@pytest.mark.asyncio()
async def test_no_duplicates_across_cyclic_links(basic_config, make_site, html_links):
    pages = {
        "https://a.test/": html_links("/blog/1", "/blog/2", "/blog/3"),
        "https://a.test/blog/1": html_links("/", "/blog/2", "/blog/3", "/blog/1#top"),
        "https://a.test/blog/2": html_links("/blog/1", "/blog/3", "https://A.TEST/blog/2"),
        "https://a.test/blog/3": html_links("/blog/1", "/blog/2", "/"),
    }
    site = make_site(pages)
    records = await CrawlDispatcher(basic_config, site.fetch).run()

    urls = [r.url for r in records]
    assert len(urls) == len(set(urls)) == 3
    assert sorted(site.calls) == sorted(pages)
    assert max(Counter(site.calls).values()) == 1


@pytest.mark.asyncio()
async def test_fetch_error_does_not_halt_other_branches(basic_config, make_site, html_links):
    site = make_site(
        {
            "https://a.test/": html_links("/blog/broken", "/blog/ok"),
            "https://a.test/blog/ok": html_links("/blog/deeper"),
            "https://a.test/blog/deeper": "",
        },
        failing=["https://a.test/blog/broken"],
    )
    dispatcher = CrawlDispatcher(basic_config, site.fetch)
    records = await dispatcher.run()

    assert {r.url for r in records} == {
        "https://a.test/blog/broken",
        "https://a.test/blog/ok",
        "https://a.test/blog/deeper",
    }
    assert dispatcher.stats.failed == 1
    assert "https://a.test/blog/deeper" in site.calls


@pytest.mark.asyncio()
async def test_unexpected_fetch_exception_is_contained(basic_config, html_links):
    async def fetch(url: str) -> PageData:
        if url.endswith("/boom"):
            raise RuntimeError("parser exploded")
        return PageData(url, html_links("/boom", "/blog/fine") if url == "https://a.test/" else "")

    dispatcher = CrawlDispatcher(basic_config, fetch)
    records = await asyncio.wait_for(dispatcher.run(), timeout=5)
    assert [r.url for r in records] == ["https://a.test/blog/fine"]
    assert dispatcher.stats.failed == 1


@pytest.mark.asyncio()
async def test_static_assets_recorded_but_not_fetched(basic_config, make_site, html_links):
    site = make_site({"https://a.test/": html_links("/blog/app.js", "/static/seo.png", "/blog/styles.css")})
    records = await CrawlDispatcher(basic_config, site.fetch).run()

    assert len(records) == 3
    assert site.calls == ["https://a.test/"]


@pytest.mark.asyncio()
async def test_links_resolved_against_final_url(basic_config, make_site, html_links):
    site = make_site(
        {"https://a.test/new/": html_links("blog")},
        redirects={"https://a.test/": "https://a.test/new/"},
    )
    records = await CrawlDispatcher(basic_config, site.fetch).run()
    assert [(r.url, r.found_on_page) for r in records] == [("https://a.test/new/blog", "https://a.test/new/")]


@pytest.mark.asyncio()
async def test_redirect_target_is_not_refetched(basic_config, make_site, html_links):
    site = make_site(
        {"https://a.test/new/": html_links("/new/", "/new/blog")},
        redirects={"https://a.test/": "https://a.test/new/"},
    )
    dispatcher = CrawlDispatcher(basic_config, site.fetch)
    records = await dispatcher.run()

    assert site.calls == ["https://a.test/", "https://a.test/new/blog"]
    assert [r.url for r in records] == ["https://a.test/new/blog"]
    assert dispatcher.stats.links["duplicate"] == 1


@pytest.mark.asyncio()
async def test_redirect_outside_allowed_domains_yields_no_links(basic_config, make_site, html_links):
    site = make_site(
        {"https://other.test/": html_links("/blog/offsite")},
        redirects={"https://a.test/": "https://other.test/"},
    )
    records = await CrawlDispatcher(basic_config, site.fetch).run()

    assert records == []
    assert site.calls == ["https://a.test/"]


@pytest.mark.asyncio()
async def test_seeds_are_not_recorded_or_refetched(basic_config, make_site, html_links):
    cfg = basic_config.model_copy(update={"seed_urls": ["https://a.test/blog/"]})
    site = make_site({"https://a.test/blog/": html_links("/blog/", "https://a.test/blog/#x")})
    records = await CrawlDispatcher(cfg, site.fetch).run()
    assert records == []
    assert site.calls == ["https://a.test/blog/"]


@pytest.mark.asyncio()
async def test_invalid_and_out_of_scope_seeds_skipped(basic_config, make_site, html_links):
    site = make_site({"https://a.test/": html_links("/seo")})
    records = await CrawlDispatcher(basic_config, site.fetch).run(
        ["mailto:a@a.test", "https://other.test/", "https://a.test/", "https://a.test/"]
    )
    assert [r.url for r in records] == ["https://a.test/seo"]
    assert site.calls.count("https://a.test/") == 1
    assert "https://other.test/" not in site.calls


@pytest.mark.asyncio()
async def test_custom_classifier(basic_config, make_site, html_links):
    class RecordEverything:
        def classify(self, url: str) -> Classification:
            return Classification(relevant=True, followable=False)

    site = make_site({"https://a.test/": html_links("/about", "/team")})
    records = await CrawlDispatcher(basic_config, site.fetch, classifier=RecordEverything()).run()
    assert [r.url for r in records] == ["https://a.test/about", "https://a.test/team"]
    assert site.calls == ["https://a.test/"]


# --------------------------------------------------------------------------- #
#                          Cancellation & limits                              #
# --------------------------------------------------------------------------- #


@pytest.mark.asyncio()
async def test_stop_before_run_fetches_nothing(basic_config, make_site):
    site = make_site({"https://a.test/": ""})
    dispatcher = CrawlDispatcher(basic_config, site.fetch)
    dispatcher.stop()
    assert await dispatcher.run() == []
    assert site.calls == []


@pytest.mark.asyncio()
async def test_stop_mid_crawl_returns_partial_results(basic_config, html_links):
    calls = []
    holder = {}

    async def fetch(url: str) -> PageData:
        calls.append(url)
        if url == "https://a.test/":
            return PageData(url, html_links(*(f"/blog/{i}" for i in range(20))))
        holder["dispatcher"].stop()
        return PageData(url, html_links("/blog/never"))

    cfg = basic_config.model_copy(update={"concurrency": 1})
    dispatcher = CrawlDispatcher(cfg, fetch)
    holder["dispatcher"] = dispatcher
    records = await asyncio.wait_for(dispatcher.run(), timeout=5)

    assert len(records) == 20
    assert len(calls) == 2
    assert "https://a.test/blog/never" not in {r.url for r in records}


@pytest.mark.asyncio()
async def test_max_pages_limits_fetches(basic_config, make_site, html_links):
    cfg = basic_config.model_copy(update={"max_pages": 1})
    site = make_site(
        {
            "https://a.test/": html_links("/blog/1", "/blog/2"),
            "https://a.test/blog/1": html_links("/blog/3"),
            "https://a.test/blog/2": "",
        }
    )
    dispatcher = CrawlDispatcher(cfg, site.fetch)
    records = await dispatcher.run()
    assert site.calls == ["https://a.test/"]
    assert {r.url for r in records} == {"https://a.test/blog/1", "https://a.test/blog/2"}
    assert dispatcher.budget_spent
    assert not dispatcher.stopped


@pytest.mark.asyncio()
async def test_max_pages_keeps_links_of_pages_in_flight(basic_config, make_site, html_links):
    cfg = basic_config.model_copy(update={"max_pages": 2})
    site = make_site(
        {
            "https://a.test/": html_links("/blog/1", "/blog/2"),
            "https://a.test/blog/1": html_links("/blog/deep"),
            "https://a.test/blog/2": "",
        },
        delay=0.05,
    )
    dispatcher = CrawlDispatcher(cfg, site.fetch)
    records = await asyncio.wait_for(dispatcher.run(), timeout=5)

    assert site.calls == ["https://a.test/", "https://a.test/blog/1"]
    assert dispatcher.stats.fetched == 2
    assert {r.url for r in records} == {
        "https://a.test/blog/1",
        "https://a.test/blog/2",
        "https://a.test/blog/deep",
    }
    assert dispatcher.stats.links["cancelled"] == 0


# --------------------------------------------------------------------------- #
#                          Concurrency & politeness                           #
# --------------------------------------------------------------------------- #

SLOW_FETCH: float = 0.3


@pytest.mark.asyncio()
async def test_pages_fetched_concurrently(basic_config, make_site, html_links):
    site = make_site(
        {
            "https://a.test/": html_links("/slow1", "/slow2", "/slow3"),
            "https://a.test/slow1": "",
            "https://a.test/slow2": "",
            "https://a.test/slow3": "",
        },
        delay=SLOW_FETCH,
    )
    start = time.perf_counter()
    await CrawlDispatcher(basic_config, site.fetch).run()
    elapsed = time.perf_counter() - start

    # root + one parallel round, well below four sequential fetches
    assert elapsed < SLOW_FETCH * 3
    assert len(site.calls) == 4


@pytest.mark.asyncio()
async def test_per_host_parallelism(basic_config, html_links):
    active = Counter()
    peak = Counter()

    async def fetch(url: str) -> PageData:
        host = url.split("/")[2]
        active[host] += 1
        peak[host] = max(peak[host], active[host])
        await asyncio.sleep(0.02)
        active[host] -= 1
        if url == "https://a.test/":
            hrefs = [f"/p{i}" for i in range(6)] + [f"https://b.a.test/p{i}" for i in range(6)]
            return PageData(url, html_links(*hrefs))
        return PageData(url, "")

    cfg = basic_config.model_copy(update={"concurrency": 12, "per_host_parallelism": 2})
    await CrawlDispatcher(cfg, fetch).run()

    assert peak["a.test"] == 2
    assert peak["b.a.test"] == 2


@pytest.mark.asyncio()
async def test_per_host_delay(basic_config, html_links):
    starts = []

    async def fetch(url: str) -> PageData:
        starts.append(time.monotonic())
        if url == "https://a.test/":
            return PageData(url, html_links("/one", "/two"))
        return PageData(url, "")

    cfg = basic_config.model_copy(update={"per_host_delay": 0.2})
    await CrawlDispatcher(cfg, fetch).run()

    assert len(starts) == 3
    gaps = [b - a for a, b in zip(starts, starts[1:])]
    assert all(gap >= 0.19 for gap in gaps)
