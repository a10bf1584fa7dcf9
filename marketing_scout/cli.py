#!/usr/bin/env python3
"""
Точка входа для запуска краулера MarketingScout через командную строку.

Команды:
  crawl     Запустить обход и сохранить найденные маркетинговые URL
  config    Показать текущую конфигурацию

Общие опции:
  --config PATH       Путь к YAML/JSON-конфигу (default: configs/default.yaml или встроенные значения)
  --limit INT         Макс. число загружаемых страниц (override max_pages)
  --log-level LEVEL   Уровень логирования (DEBUG, INFO, ...)
  --log-file PATH     Файл для логов (stdout, если не указан)
  --log-format FORMAT Формат логирования (e.g. "%(asctime)s %(levelname)s %(message)s")

Команда crawl опции:
  --output PATH       Куда сохранить JSON (default: output из конфига)
  --html PATH         Сохранить HTML-сводку в файл
  --template DIR      Папка с Jinja2-шаблоном report.html.j2
  --scan-timeout SEC  Остановить обход через SEC секунд (найденное сохраняется)
  --notify            Отправить лог обхода по e-mail
  --env-file PATH     .env с настройками почты

Дополнительно:
  --version, -v       Показать версию MarketingScout

Пример:
  marketing-scout --limit 200 crawl --output marketing_urls.json --html report.html
"""
import asyncio
import json
import sys
from pathlib import Path

import click

from marketing_scout import __version__
from marketing_scout.config import load_config
from marketing_scout.engine import start_crawl
from marketing_scout.errors import ConfigurationError, PersistenceError
from marketing_scout.logger import capture_logs, init_logging
from marketing_scout.notifier import load_notifier_settings, send_log
from marketing_scout.report.html_report import DEFAULT_TEMPLATE_DIR, render_html
from marketing_scout.report.json_report import persist

CONTEXT_SETTINGS = dict(help_option_names=["--help"])


def print_error(message: str):
    click.secho(message, fg='red', err=True)
    sys.exit(1)


@click.group(context_settings=CONTEXT_SETTINGS)
@click.version_option(__version__, '--version', '-v', message='MarketingScout, version %(version)s')
@click.option(
    '--config', '-c', 'config_path',
    default=None,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help='Путь к файлу конфигурации YAML/JSON.'
)
@click.option(
    '--limit', '-l', 'limit',
    type=click.IntRange(min=1),
    default=None,
    help='Макс. число загружаемых страниц (override max_pages)'
)
@click.option(
    '--log-level', 'log_level',
    default='INFO', show_default=True,
    type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']),
    help='Уровень логирования'
)
@click.option(
    '--log-file', 'log_file',
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Путь к файлу логов (stdout, если не указан)'
)
@click.option(
    '--log-format', 'log_format',
    default='%(asctime)s %(levelname)s %(message)s',
    show_default=True,
    help='Строка формата для логов'
)
@click.pass_context
def cli(ctx, config_path, limit, log_level, log_file, log_format):
    """Группа команд MarketingScout CLI."""
    init_logging(
        level=log_level,
        log_file=str(log_file) if log_file else None,
        log_format=log_format
    )
    try:
        cfg = load_config(config_path)
    except Exception as e:
        print_error(f'Ошибка загрузки конфигурации: {e}')
    if limit is not None:
        cfg = cfg.model_copy(update={'max_pages': limit})
    ctx.ensure_object(dict)
    ctx.obj['config'] = cfg
    ctx.obj['log_format'] = log_format


@cli.command('crawl', context_settings=CONTEXT_SETTINGS)
@click.option(
    '--output', '-o', 'output',
    default=None,
    type=click.Path(dir_okay=False, path_type=Path),
    help='Куда сохранить JSON (по умолчанию output из конфига)'
)
@click.option(
    '--html', '-h', 'html_output',
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Сохранить HTML-сводку в файл'
)
@click.option(
    '--template', '-t', 'template_dir',
    default=DEFAULT_TEMPLATE_DIR,
    show_default=True,
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    help='Папка с Jinja2-шаблоном report.html.j2'
)
@click.option(
    '--scan-timeout', 'scan_timeout',
    type=click.FloatRange(min=0, min_open=True),
    default=None,
    help='Остановить обход через указанное число секунд'
)
@click.option(
    '--notify', is_flag=True,
    help='Отправить лог обхода по e-mail'
)
@click.option(
    '--env-file', 'env_file',
    default=None,
    type=click.Path(dir_okay=False, path_type=Path),
    help='.env с EMAIL_FROM / EMAIL_PASSWORD / EMAIL_TO'
)
@click.pass_context
def crawl(ctx, output, html_output, template_dir, scan_timeout, notify, env_file):
    """Запустить обход и сохранить найденные URL."""
    cfg = ctx.obj['config']
    destination = output or Path(cfg.output)

    settings = None
    buffer = None
    if notify:
        try:
            settings = load_notifier_settings(env_file)
        except ConfigurationError as e:
            print_error(f'Ошибка конфигурации уведомлений: {e}')
        buffer = capture_logs(ctx.obj['log_format'])

    click.echo(f'Starting crawl: {len(cfg.seed_urls)} seed URLs, {len(cfg.allowed_domains)} allowed domains')
    try:
        records = asyncio.run(start_crawl(cfg, stop_after=scan_timeout))
    except Exception as e:
        print_error(f'Ошибка при обходе: {e}')

    click.echo(f'Crawling finished. It found {len(records)} URLs with marketing content.')

    try:
        saved = persist(records, destination)
        click.echo(f'URLs saved in {saved}')
    except PersistenceError as e:
        click.secho(f'Ошибка при сохранении JSON: {e}', fg='red', err=True)
        # данные не теряем: выводим их в stdout
        click.echo(json.dumps([r.to_dict() for r in records], ensure_ascii=False, indent=2))
        sys.exit(1)

    if html_output:
        try:
            saved_html = render_html(records, template_dir, html_output)
            click.echo(f'HTML report: {saved_html}')
        except Exception as e:
            print_error(f'Ошибка при сохранении HTML: {e}')

    if settings is not None and buffer is not None:
        if not send_log(buffer.text(), settings):
            click.secho('E-mail с логом не отправлен', fg='yellow', err=True)


@cli.command('config', context_settings=CONTEXT_SETTINGS)
@click.pass_context
def show_config(ctx):
    """Показать текущую конфигурацию в JSON."""
    cfg = ctx.obj['config']
    click.echo(cfg.model_dump_json(indent=2))


if __name__ == "__main__":
    cli()
