# File: site_crawler/report/__init__.py
"""site_crawler.report: Репортёры результатов обхода и генерация отчётов (JSON и HTML)."""

from __future__ import annotations

from site_crawler.report.console import CollectingReporter, ConsoleReporter, MultiReporter
from site_crawler.report.html_report import render_html
from site_crawler.report.json_report import render_json

__all__ = [
    "CollectingReporter",
    "ConsoleReporter",
    "MultiReporter",
    "render_html",
    "render_json",
]
