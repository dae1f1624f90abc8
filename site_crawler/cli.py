# === FILE: site_crawler/cli.py ===
#!/usr/bin/env python3
"""
Точка входа для запуска краулера SiteCrawler через командную строку.

Использование:
  site-crawler URL [опции]

Опции обхода (перекрывают значения из --config):
  --max-concurrency N   Число одновременных загрузок (default: 10)
  --delay N             Пауза между запросами воркера, мс (default: 100)
  --timeout N           Таймаут запроса, мс (default: 30000)
  --max-retries N       Число повторов запроса (default: 3)
  --user-agent STRING   Заголовок User-Agent (default: "WebCrawler/1.0")

Прочее:
  --config PATH         YAML/JSON-файл с настройками обхода
  --json PATH           Сохранить JSON-отчёт в файл
  --html PATH           Сохранить HTML-отчёт в файл
  --log-level LEVEL     Уровень логирования (DEBUG, INFO, ...)
  --log-file PATH       Файл для логов (только консоль, если не указан)
  --version, -v         Показать версию SiteCrawler

Пример:
  site-crawler https://example.com --max-concurrency 5 --delay 200 --json report.json
"""
import asyncio
import sys
from pathlib import Path

import click
from pydantic import ValidationError

from site_crawler import __version__
from site_crawler.config import load_config
from site_crawler.crawler.models import CrawlUrl
from site_crawler.engine import start_crawl
from site_crawler.logger import init_logging
from site_crawler.report.console import CollectingReporter, ConsoleReporter, MultiReporter
from site_crawler.report.html_report import render_html
from site_crawler.report.json_report import render_json

CONTEXT_SETTINGS = dict(help_option_names=["--help"])


class CrawlCommand(click.Command):
    """Команда, у которой любая ошибка использования завершает процесс с кодом 1.

    `--help` и `--version` по-прежнему выходят с кодом 0.
    """

    def main(self, *args, **kwargs):
        kwargs["standalone_mode"] = False
        try:
            rv = super().main(*args, **kwargs)
        except click.ClickException as e:
            e.show()
            sys.exit(1)
        except click.Abort:
            click.echo("Aborted!", err=True)
            sys.exit(1)
        sys.exit(rv if isinstance(rv, int) else 0)


def print_error(message: str):
    click.secho(message, fg='red', err=True)
    sys.exit(1)


def _format_validation_error(exc: ValidationError) -> str:
    return "; ".join(
        f"{'.'.join(str(p) for p in err['loc']) or 'value'}: {err['msg']}" for err in exc.errors()
    )


@click.command(cls=CrawlCommand, context_settings=CONTEXT_SETTINGS)
@click.version_option(__version__, '--version', '-v', message='SiteCrawler, version %(version)s')
@click.argument('url')
@click.option('--max-concurrency', 'max_concurrency', type=int, default=None,
              help='Число одновременных загрузок страниц.')
@click.option('--delay', 'request_delay_millis', type=int, default=None,
              help='Пауза воркера после каждой страницы, мс.')
@click.option('--timeout', 'timeout_millis', type=int, default=None,
              help='Таймаут одного запроса, мс.')
@click.option('--max-retries', 'max_retries', type=int, default=None,
              help='Число повторов запроса при 5xx/429 и сетевых ошибках.')
@click.option('--user-agent', 'user_agent', default=None,
              help='Заголовок User-Agent.')
@click.option(
    '--config', '-c', 'config_path',
    default=None,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help='Путь к файлу конфигурации YAML/JSON.'
)
@click.option(
    '--json', '-j', 'json_output',
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Сохранить JSON-отчёт в файл'
)
@click.option(
    '--html', 'html_output',
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Сохранить HTML-отчёт в файл'
)
@click.option(
    '--log-level', 'log_level',
    default='INFO', show_default=True,
    type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'], case_sensitive=False),
    help='Уровень логирования'
)
@click.option(
    '--log-file', 'log_file',
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Путь к файлу логов (только консоль, если не указан)'
)
def cli(url, max_concurrency, request_delay_millis, timeout_millis, max_retries, user_agent,
        config_path, json_output, html_output, log_level, log_file):
    """Обойти все страницы сайта URL в пределах его домена."""
    init_logging(level=log_level, log_file=str(log_file) if log_file else None)

    overrides = {
        'max_concurrency': max_concurrency,
        'request_delay_millis': request_delay_millis,
        'timeout_millis': timeout_millis,
        'max_retries': max_retries,
        'user_agent': user_agent,
    }
    try:
        cfg = load_config(config_path, overrides)
    except ValidationError as e:
        print_error(f'Ошибка конфигурации: {_format_validation_error(e)}')
    except Exception as e:
        print_error(f'Ошибка загрузки конфигурации: {e}')

    try:
        seed = CrawlUrl(url)
    except ValidationError as e:
        print_error(f'Некорректный URL {url!r}: {_format_validation_error(e)}')

    collector = CollectingReporter()
    reporter = MultiReporter([ConsoleReporter(), collector])
    try:
        asyncio.run(start_crawl(seed, cfg, reporter))
    except Exception as e:
        print_error(f'Ошибка при обходе: {e}')

    if json_output or html_output:
        report = collector.build_report()
        if json_output:
            try:
                saved_json = render_json(report, json_output)
                click.echo(f'JSON report: {saved_json}')
            except Exception as e:
                print_error(f'Ошибка при сохранении JSON: {e}')
        if html_output:
            try:
                saved_html = render_html(report, html_output)
                click.echo(f'HTML report: {saved_html}')
            except Exception as e:
                print_error(f'Ошибка при сохранении HTML: {e}')


if __name__ == "__main__":
    cli()
