# File: site_crawler/report/console.py
"""site_crawler.report.console: Реализации ResultReporter для консоли и для сбора в память."""

from __future__ import annotations

import threading
from typing import List, Optional, Sequence

import click

from site_crawler.aggregator import CrawlReport, aggregate_results
from site_crawler.crawler.interfaces import ResultReporter
from site_crawler.crawler.models import CrawlResult, CrawlStatus, CrawlSummary

_RULE = "=" * 50


class ConsoleReporter:
    """Печатает каждую страницу и итоговую сводку через click.echo."""

    def __init__(self, *, color: Optional[bool] = None, err: bool = False) -> None:
        self.color = color
        self.err = err

    def _echo(self, message: str = "", **style) -> None:
        if style:
            message = click.style(message, **style)
        click.echo(message, err=self.err, color=self.color)

    def report_result(self, result: CrawlResult) -> None:
        if result.status is CrawlStatus.SUCCESS:
            self._echo(f"✓ Crawled: {result.url}", fg="green")
            if result.links:
                self._echo(f"  Found {len(result.links)} links:")
                for link in result.links:
                    self._echo(f"    - {link}")
            else:
                self._echo("  No links found")
        elif result.status is CrawlStatus.FAILED:
            self._echo(f"✗ Failed to crawl: {result.url}", fg="red")
            if result.error_message:
                self._echo(f"  Error: {result.error_message}")
        else:
            self._echo(f"- Skipped: {result.url}", fg="yellow")
        self._echo()

    def report_completion(self, total: int, successful: int, failed: int) -> None:
        rate = (successful * 100) // total if total else 0
        self._echo(_RULE)
        self._echo("CRAWL COMPLETED", bold=True)
        self._echo(_RULE)
        self._echo(f"Total pages processed: {total}")
        self._echo(f"Successful: {successful}")
        self._echo(f"Failed: {failed}")
        self._echo(f"Success rate: {rate}%")
        self._echo(_RULE)


class CollectingReporter:
    """Копит результаты в памяти, чтобы после обхода собрать CrawlReport."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self.results: List[CrawlResult] = []
        self.summary: Optional[CrawlSummary] = None
        self.completions = 0

    def report_result(self, result: CrawlResult) -> None:
        with self._lock:
            self.results.append(result)

    def report_completion(self, total: int, successful: int, failed: int) -> None:
        with self._lock:
            skipped = sum(1 for r in self.results if r.status is CrawlStatus.SKIPPED)
            self.summary = CrawlSummary(total, successful, failed, skipped)
            self.completions += 1

    def build_report(self) -> CrawlReport:
        with self._lock:
            return aggregate_results(self.results, self.summary)


class MultiReporter:
    """Рассылает каждое событие всем вложенным репортёрам по порядку."""

    def __init__(self, reporters: Sequence[ResultReporter]) -> None:
        self.reporters = list(reporters)

    def report_result(self, result: CrawlResult) -> None:
        for reporter in self.reporters:
            reporter.report_result(result)

    def report_completion(self, total: int, successful: int, failed: int) -> None:
        for reporter in self.reporters:
            reporter.report_completion(total, successful, failed)
