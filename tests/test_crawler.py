# File: tests/test_crawler.py
# Test-suite for the AsyncCrawler worker pool / orchestrator, run against in-memory collaborators
from __future__ import annotations

import asyncio
import time

import pytest
from conftest import RecordingReporter, StubFetcher, page
from pydantic import ValidationError
from site_crawler.config import CrawlerConfig
from site_crawler.crawler.crawler import FETCH_FAILED_MESSAGE, AsyncCrawler
from site_crawler.crawler.fetcher import FetchError
from site_crawler.crawler.models import CrawlStatus, CrawlSummary, CrawlUrl

ROOT = "https://example.com/"


def make_crawler(fetcher, extractor, reporter, config, **kwargs) -> AsyncCrawler:
    return AsyncCrawler(fetcher=fetcher, extractor=extractor, reporter=reporter, config=config, **kwargs)


async def run(crawler: AsyncCrawler, seed="example.com", timeout: float = 10.0) -> CrawlSummary:
    return await asyncio.wait_for(crawler.crawl_website(seed), timeout=timeout)


def assert_at_most_once(reporter: RecordingReporter) -> None:
    urls = [r.url.normalized for r in reporter.results]
    assert len(urls) == len(set(urls)), f"duplicates in {urls}"


# --------------------------------------------------------------------------- #
#                              Basic scenarios                                #
# --------------------------------------------------------------------------- #


@pytest.mark.asyncio()
async def test_single_page_without_links(fast_config, extractor, reporter):
    fetcher = StubFetcher({ROOT: page()})
    summary = await run(make_crawler(fetcher, extractor, reporter, fast_config))

    assert summary == CrawlSummary(total_pages=1, successful_pages=1, failed_pages=0)
    assert fetcher.calls == [ROOT]
    assert reporter.completions == [(1, 1, 0)]
    assert reporter.results[0].status is CrawlStatus.SUCCESS
    assert reporter.results[0].links == ()


@pytest.mark.asyncio()
async def test_duplicate_links_fetched_once(fast_config, extractor, reporter):
    fetcher = StubFetcher({
        ROOT: page("/page1", "/page1", "https://example.com/page1/"),
        "https://example.com/page1": page("/", "/page1"),
    })
    summary = await run(make_crawler(fetcher, extractor, reporter, fast_config))

    assert fetcher.call_counts["https://example.com/page1"] == 1
    assert summary.total_pages == 2
    assert summary.successful_pages == 2
    assert_at_most_once(reporter)


@pytest.mark.asyncio()
async def test_other_domains_never_fetched(fast_config, extractor, reporter):
    fetcher = StubFetcher({
        ROOT: page("https://example.com/page1", "https://other.com/page1", "https://sub.example.com/page1"),
        "https://example.com/page1": page("https://other.com/", "https://other.com/page1"),
    })
    summary = await run(make_crawler(fetcher, extractor, reporter, fast_config))

    assert summary.total_pages == 2
    assert set(fetcher.calls) == {ROOT, "https://example.com/page1"}
    for result in reporter.results:
        assert result.url.domain == "example.com"
        assert all(link.domain == "example.com" for link in result.links)
    assert "other.com" not in " ".join(r.url.normalized for r in reporter.results)


@pytest.mark.asyncio()
async def test_absent_seed_page_is_failed(fast_config, extractor, reporter):
    fetcher = StubFetcher({ROOT: None})
    summary = await run(make_crawler(fetcher, extractor, reporter, fast_config))

    assert summary == CrawlSummary(total_pages=1, successful_pages=0, failed_pages=1)
    (result,) = reporter.results
    assert result.status is CrawlStatus.FAILED
    assert result.error_message == FETCH_FAILED_MESSAGE


@pytest.mark.asyncio()
async def test_mutual_links_terminate(fast_config, extractor, reporter):
    fetcher = StubFetcher({
        "https://example.com/a": page("/b"),
        "https://example.com/b": page("/a"),
    })
    summary = await run(make_crawler(fetcher, extractor, reporter, fast_config), seed="example.com/a")

    assert summary.total_pages == 2
    assert summary.successful_pages == 2
    assert fetcher.call_counts == {"https://example.com/a": 1, "https://example.com/b": 1}


@pytest.mark.asyncio()
async def test_invalid_seed_fails_before_fetching(fast_config, extractor, reporter):
    fetcher = StubFetcher({})
    crawler = make_crawler(fetcher, extractor, reporter, fast_config)
    with pytest.raises(ValidationError):
        await crawler.crawl_website("ht tp://bad url")
    assert fetcher.calls == []
    assert reporter.results == []
    assert reporter.completions == []


# --------------------------------------------------------------------------- #
#                          Per-page error handling                            #
# --------------------------------------------------------------------------- #


@pytest.mark.asyncio()
async def test_fetch_exception_is_contained(fast_config, extractor, reporter):
    fetcher = StubFetcher({
        ROOT: page("/ok", "/boom", "/silent"),
        "https://example.com/ok": page(),
        "https://example.com/boom": FetchError("https://example.com/boom", "connection reset"),
        "https://example.com/silent": RuntimeError(),
    })
    summary = await run(make_crawler(fetcher, extractor, reporter, fast_config))

    assert summary == CrawlSummary(total_pages=4, successful_pages=2, failed_pages=2)
    results = reporter.by_url()
    assert "connection reset" in results["https://example.com/boom"].error_message
    assert results["https://example.com/silent"].error_message == "RuntimeError"


@pytest.mark.asyncio()
async def test_extraction_exception_marks_page_failed(fast_config, reporter):
    class ExplodingExtractor:
        def extract_links(self, html, base_url):
            raise ValueError("unparsable markup")

    fetcher = StubFetcher({ROOT: page("/never")})
    summary = await run(make_crawler(fetcher, ExplodingExtractor(), reporter, fast_config))

    assert summary == CrawlSummary(total_pages=1, successful_pages=0, failed_pages=1)
    assert reporter.results[0].error_message == "unparsable markup"
    assert fetcher.calls == [ROOT]


@pytest.mark.asyncio()
async def test_reporter_failure_aborts_crawl(fast_config, extractor):
    class BrokenReporter(RecordingReporter):
        def report_result(self, result):
            raise OSError("disk full")

    reporter = BrokenReporter()
    fetcher = StubFetcher({ROOT: page("/a", "/b"), "https://example.com/a": page(), "https://example.com/b": page()})
    crawler = make_crawler(fetcher, extractor, reporter, fast_config)

    with pytest.raises(OSError, match="disk full"):
        await run(crawler)
    assert reporter.completions == []


# --------------------------------------------------------------------------- #
#                               Concurrency                                   #
# --------------------------------------------------------------------------- #


def _site(n: int) -> dict:
    """Every page links to every other page: heavy concurrent rediscovery."""
    links = ["/"] + [f"/p{i}" for i in range(n)]
    pages = {ROOT: page(*links)}
    for i in range(n):
        pages[f"https://example.com/p{i}"] = page(*reversed(links))
    return pages


@pytest.mark.asyncio()
async def test_at_most_once_under_concurrent_discovery(extractor, reporter):
    config = CrawlerConfig(max_concurrency=8, request_delay_millis=0, max_retries=0)
    fetcher = StubFetcher(_site(40), delay=0.001)
    summary = await run(make_crawler(fetcher, extractor, reporter, config))

    assert summary.total_pages == 41
    assert summary.successful_pages == 41
    assert summary.total_pages == summary.successful_pages + summary.failed_pages
    assert max(fetcher.call_counts.values()) == 1
    assert_at_most_once(reporter)
    assert fetcher.max_active > 1


@pytest.mark.asyncio()
async def test_permits_bound_in_flight_fetches(extractor, reporter):
    config = CrawlerConfig(max_concurrency=2, request_delay_millis=0, max_retries=0)
    fetcher = StubFetcher(_site(10), delay=0.01)
    crawler = make_crawler(fetcher, extractor, reporter, config, workers=6)
    summary = await run(crawler)

    assert crawler.workers == 6
    assert summary.total_pages == 11
    assert fetcher.max_active <= 2


@pytest.mark.asyncio()
async def test_fetches_run_concurrently(extractor, reporter):
    config = CrawlerConfig(max_concurrency=4, request_delay_millis=0, max_retries=0)
    fetcher = StubFetcher({ROOT: page("/s1", "/s2", "/s3"), **{f"https://example.com/s{i}": page() for i in (1, 2, 3)}},
                          delay=0.3)
    start = time.perf_counter()
    summary = await run(make_crawler(fetcher, extractor, reporter, config))
    elapsed = time.perf_counter() - start

    assert summary.total_pages == 4
    # root, then the three slow pages in parallel
    assert elapsed < 0.3 * 3
    assert fetcher.max_active == 3


@pytest.mark.asyncio()
async def test_request_delay_does_not_hold_completion(extractor, reporter):
    config = CrawlerConfig(max_concurrency=1, request_delay_millis=5000, max_retries=0)
    fetcher = StubFetcher({ROOT: page()})
    start = time.perf_counter()
    summary = await run(make_crawler(fetcher, extractor, reporter, config), timeout=3)

    assert summary.total_pages == 1
    assert time.perf_counter() - start < 2


@pytest.mark.asyncio()
async def test_idle_workers_wait_for_slow_discovery(extractor, reporter):
    # the only page with links is slow, every other worker sits on an empty frontier meanwhile
    config = CrawlerConfig(max_concurrency=5, request_delay_millis=0, max_retries=0)
    fetcher = StubFetcher({ROOT: page("/deep"), "https://example.com/deep": page("/deeper"),
                           "https://example.com/deeper": page()}, delay=0.05)
    summary = await run(make_crawler(fetcher, extractor, reporter, config))

    assert summary.total_pages == 3
    assert [r.url.normalized for r in reporter.results] == [
        ROOT, "https://example.com/deep", "https://example.com/deeper",
    ]


def test_rejects_non_positive_worker_count(fast_config, extractor, reporter):
    with pytest.raises(ValueError):
        make_crawler(StubFetcher({}), extractor, reporter, fast_config, workers=0)
