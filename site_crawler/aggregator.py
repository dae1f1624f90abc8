# File: site_crawler/aggregator.py
"""site_crawler.aggregator: Счётчики обхода и итоговый отчёт."""

from __future__ import annotations

import json
import threading
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, TypedDict

from site_crawler.crawler.models import CrawlResult, CrawlStatus, CrawlSummary


class PageInfo(TypedDict, total=False):
    """Информация о посещённой странице."""

    url: str
    status: str
    links: List[str]
    error: str | None


class CrawlCounters:
    """Потокобезопасные счётчики totalPages / successfulPages / failedPages.

    ``total`` растёт на каждую страницу; SKIPPED не попадает ни в успешные,
    ни в ошибочные.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._counts: Dict[CrawlStatus, int] = {status: 0 for status in CrawlStatus}
        self._total = 0

    def record(self, result: CrawlResult) -> None:
        with self._lock:
            self._total += 1
            self._counts[result.status] += 1

    def snapshot(self) -> CrawlSummary:
        """Возвращает CrawlSummary из текущих значений счётчиков."""
        with self._lock:
            return CrawlSummary(
                total_pages=self._total,
                successful_pages=self._counts[CrawlStatus.SUCCESS],
                failed_pages=self._counts[CrawlStatus.FAILED],
                skipped_pages=self._counts[CrawlStatus.SKIPPED],
            )


@dataclass(slots=True)
class CrawlReport:
    """Итог обхода: сводка и список страниц в порядке посещения."""

    summary: CrawlSummary = field(default_factory=CrawlSummary)
    pages: List[PageInfo] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {"summary": self.summary.to_dict(), "pages": list(self.pages)}

    def json(self, *, pretty: bool = False) -> str:
        """Возвращает JSON-представление отчёта."""
        return json.dumps(self.to_dict(), ensure_ascii=False, indent=2 if pretty else None)


def aggregate_results(results: Iterable[CrawlResult], summary: CrawlSummary | None = None) -> CrawlReport:
    """Собирает CrawlReport; без *summary* счётчики пересчитываются по *results*."""
    results = list(results)
    if summary is None:
        counters = CrawlCounters()
        for result in results:
            counters.record(result)
        summary = counters.snapshot()
    pages: List[PageInfo] = [result.to_dict() for result in results]  # type: ignore[misc]
    return CrawlReport(summary=summary, pages=pages)
