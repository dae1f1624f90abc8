# File: tests/conftest.py
from __future__ import annotations

import asyncio
from collections import Counter
from collections.abc import AsyncIterator
from typing import Dict, List, Optional, Union

import pytest
from aiohttp import web
from site_crawler.config import CrawlerConfig
from site_crawler.crawler.link_extractor import SoupLinkExtractor
from site_crawler.crawler.models import CrawlResult, CrawlUrl


def pytest_configure(config):
    """Register custom markers so that `--strict-markers` does not fail."""
    config.addinivalue_line(
        "markers",
        "slow: marks tests as slow (deselect with '-m \"not slow\"')",
    )


# --------------------------------------------------------------------------- #
#                               Test doubles                                  #
# --------------------------------------------------------------------------- #


class StubFetcher:
    """In-memory PageFetcher.

    *pages* maps a normalised URL to HTML, ``None`` (absent page) or an
    exception instance to raise. Unknown URLs are absent.
    """

    def __init__(self, pages: Dict[str, Union[str, BaseException, None]], delay: float = 0.0) -> None:
        self.pages = pages
        self.delay = delay
        self.calls: List[str] = []
        self.active = 0
        self.max_active = 0

    async def fetch_page(self, url: CrawlUrl) -> Optional[str]:
        self.calls.append(url.normalized)
        self.active += 1
        self.max_active = max(self.max_active, self.active)
        try:
            # yield to the loop so concurrent workers interleave
            await asyncio.sleep(self.delay)
            page = self.pages.get(url.normalized)
            if isinstance(page, BaseException):
                raise page
            return page
        finally:
            self.active -= 1

    @property
    def call_counts(self) -> Counter:
        return Counter(self.calls)


class RecordingReporter:
    """ResultReporter that keeps everything it is told."""

    def __init__(self) -> None:
        self.results: List[CrawlResult] = []
        self.completions: List[tuple] = []

    def report_result(self, result: CrawlResult) -> None:
        self.results.append(result)

    def report_completion(self, total: int, successful: int, failed: int) -> None:
        self.completions.append((total, successful, failed))

    def by_url(self) -> Dict[str, CrawlResult]:
        return {r.url.normalized: r for r in self.results}


def page(*hrefs: str) -> str:
    """Minimal HTML page linking to *hrefs*."""
    anchors = "".join(f'<a href="{h}">{h}</a>' for h in hrefs)
    return f"<html><body>{anchors}</body></html>"


# --------------------------------------------------------------------------- #
#                                  Fixtures                                   #
# --------------------------------------------------------------------------- #


@pytest.fixture()
def fast_config() -> CrawlerConfig:
    """Config without inter-request delay and with a short timeout."""
    return CrawlerConfig(
        max_concurrency=4,
        request_delay_millis=0,
        timeout_millis=2000,
        max_retries=0,
        user_agent="TestAgent/1.0",
    )


@pytest.fixture()
def reporter() -> RecordingReporter:
    return RecordingReporter()


@pytest.fixture()
def extractor() -> SoupLinkExtractor:
    return SoupLinkExtractor()


async def serve_app(app: web.Application) -> AsyncIterator[str]:
    """Start *app* on a free local port, yield base URL, ensure cleanup."""
    runner = web.AppRunner(app)
    await runner.setup()
    site = web.TCPSite(runner, "127.0.0.1", 0)
    await site.start()
    host, port = runner.addresses[0][:2]
    try:
        yield f"http://{host}:{port}"
    finally:
        await runner.cleanup()
