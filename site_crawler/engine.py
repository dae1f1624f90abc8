# File: site_crawler/engine.py
"""site_crawler.engine: Orchestration layer для запуска обхода с реальными адаптерами."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Optional, Union

from site_crawler.config import CrawlerConfig, load_config
from site_crawler.crawler.crawler import AsyncCrawler
from site_crawler.crawler.fetcher import AiohttpPageFetcher
from site_crawler.crawler.interfaces import ResultReporter
from site_crawler.crawler.link_extractor import SoupLinkExtractor
from site_crawler.crawler.models import CrawlSummary, CrawlUrl
from site_crawler.logger import logger
from site_crawler.report.console import ConsoleReporter

__all__ = ["Engine", "start_crawl"]


async def start_crawl(
    seed: Union[str, CrawlUrl],
    config: CrawlerConfig,
    reporter: Optional[ResultReporter] = None,
) -> CrawlSummary:
    """
    Проверяет стартовый URL, открывает aiohttp-сессию и запускает AsyncCrawler.

    Невалидный seed поднимает pydantic.ValidationError ещё до первого запроса.
    """
    start_url = seed if isinstance(seed, CrawlUrl) else CrawlUrl(seed)
    logger.info("Validated starting URL: %s", start_url)
    logger.info("Target domain: %s", start_url.domain)
    logger.info("Crawler configuration: %s", config.model_dump())

    async with AiohttpPageFetcher(config) as fetcher:
        crawler = AsyncCrawler(
            fetcher=fetcher,
            extractor=SoupLinkExtractor(),
            reporter=reporter or ConsoleReporter(),
            config=config,
        )
        return await crawler.crawl_website(start_url)


class Engine:
    """Фасад для скриптов и тестов: загрузка конфига и синхронный запуск обхода."""

    @staticmethod
    def load_config(path: Union[str, Path, None]) -> CrawlerConfig:
        """Загружает конфиг из YAML/JSON или использует значения по умолчанию."""
        return load_config(path)

    def __init__(self, config: Optional[CrawlerConfig] = None) -> None:
        self.config = config or CrawlerConfig()

    def run(self, seed: Union[str, CrawlUrl], reporter: Optional[ResultReporter] = None) -> CrawlSummary:
        """Запускает обход в новом event loop и возвращает CrawlSummary."""
        logger.info("Starting crawl…")
        try:
            return asyncio.run(start_crawl(seed, self.config, reporter))
        except Exception as exc:
            logger.error("Crawl failed: %s", exc)
            raise
