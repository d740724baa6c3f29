# === FILE: site_mapper/cli.py ===
#!/usr/bin/env python3
"""
Точка входа для запуска SiteMapper через командную строку.

Команды:
  fetch     Обойти дерево sitemap и вывести/сохранить результат
  config    Показать текущую конфигурацию

Общие опции:
  --config PATH       Путь к YAML/JSON-конфигу (по умолчанию: встроенные значения)
  --log-level LEVEL   Уровень логирования (DEBUG, INFO, ...)
  --log-file PATH     Файл для логов (stderr, если не указан)
  --log-format FORMAT Формат логирования (e.g. "%(asctime)s %(levelname)s %(message)s")

Команда fetch опции:
  --timeout SEC        Таймаут одного запроса
  --lastmod VALUE      Минимальный lastmod (Unix timestamp или ISO-8601)
  --concurrency INT    Сколько sitemap загружается одновременно
  --retries INT        Повторные попытки для неудачного sitemap
  --insecure           Не проверять TLS-сертификаты
  --header NAME:VALUE  Дополнительный заголовок запроса (можно повторять)
  --field NAME         Выводить записи с выбранными полями (можно повторять)
  --json PATH          Сохранить JSON-отчёт в файл
  --pretty             Преформатировать JSON-вывод (отступ 2)
  --crawl-timeout SEC  Таймаут всего обхода (секунд)

Дополнительно:
  --version, -v       Показать версию SiteMapper

Пример:
  site-mapper fetch https://example.com/sitemap.xml --retries 2 --pretty
"""
import asyncio
import json
import sys
from pathlib import Path

import click

from site_mapper import __version__
from site_mapper.config import MapperConfig, load_config, override_config
from site_mapper.engine import start_crawl
from site_mapper.logger import DEFAULT_FORMAT, init_logging
from site_mapper.parser.fields import SitemapField
from site_mapper.report.json_report import render_json

CONTEXT_SETTINGS = dict(help_option_names=["--help"])


def print_error(message: str):
    click.secho(message, fg='red', err=True)
    sys.exit(1)


def _parse_headers(values):
    headers = {}
    for raw in values:
        name, sep, value = raw.partition(':')
        if not sep or not name.strip():
            raise click.BadParameter(f"expected NAME:VALUE, got {raw!r}", param_hint='--header')
        headers[name.strip()] = value.strip()
    return headers


@click.group(context_settings=CONTEXT_SETTINGS)
@click.version_option(__version__, '--version', '-v', message='SiteMapper, version %(version)s')
@click.option(
    '--config', '-c', 'config_path',
    default=None,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help='Путь к файлу конфигурации YAML/JSON.'
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
    help='Путь к файлу логов (stderr, если не указан)'
)
@click.option(
    '--log-format', 'log_format',
    default=DEFAULT_FORMAT,
    show_default=True,
    help='Строка формата для логов'
)
@click.pass_context
def cli(ctx, config_path, log_level, log_file, log_format):
    """Группа команд SiteMapper CLI."""
    init_logging(
        level=log_level,
        log_file=str(log_file) if log_file else None,
        log_format=log_format
    )
    try:
        cfg = load_config(config_path) if config_path else MapperConfig()
    except Exception as e:
        print_error(f'Ошибка загрузки конфигурации: {e}')
    ctx.ensure_object(dict)
    ctx.obj['config'] = cfg


@cli.command('fetch', context_settings=CONTEXT_SETTINGS)
@click.argument('url', required=False)
@click.option('--timeout', type=float, default=None, help='Таймаут одного запроса (секунд)')
@click.option('--lastmod', default=None, help='Минимальный lastmod (timestamp или ISO-8601)')
@click.option('--concurrency', type=int, default=None, help='Лимит одновременных загрузок')
@click.option('--retries', type=int, default=None, help='Число повторных попыток')
@click.option('--insecure', is_flag=True, help='Не проверять TLS-сертификаты')
@click.option('--header', 'headers', multiple=True, help='Заголовок NAME:VALUE (можно повторять)')
@click.option(
    '--field', 'fields',
    multiple=True,
    type=click.Choice([f.value for f in SitemapField]),
    help='Поле записи (можно повторять)'
)
@click.option(
    '--json', '-j', 'json_output',
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Сохранить JSON-отчёт в файл'
)
@click.option('--pretty', is_flag=True, help='Преформатировать JSON-вывод (отступ 2)')
@click.option(
    '--crawl-timeout', 'crawl_timeout',
    type=float,
    default=None,
    help='Таймаут всего обхода (секунд)'
)
@click.pass_context
def fetch(ctx, url, timeout, lastmod, concurrency, retries, insecure, headers, fields,
          json_output, pretty, crawl_timeout):
    """Обойти дерево sitemap начиная с URL и вывести найденные страницы."""
    base = ctx.obj['config']
    try:
        cfg = override_config(
            base,
            url=url,
            timeout=timeout,
            lastmod=lastmod,
            concurrency=concurrency,
            retries=retries,
            verify_ssl=False if insecure else None,
            request_headers={**base.request_headers, **_parse_headers(headers)} if headers else None,
            fields=list(fields) if fields else None,
        )
    except click.BadParameter:
        raise
    except Exception as e:
        print_error(f'Некорректные параметры: {e}')

    if not cfg.url:
        print_error('Не указан URL sitemap')

    try:
        if crawl_timeout:
            result = asyncio.run(
                asyncio.wait_for(start_crawl(cfg), timeout=crawl_timeout)
            )
        else:
            result = asyncio.run(start_crawl(cfg))
    except asyncio.TimeoutError:
        print_error(f'Обход не завершён за {crawl_timeout} секунд')
    except Exception as e:
        print_error(f'Ошибка при обходе: {e}')

    if json_output:
        try:
            saved_json = render_json(result, json_output, pretty=pretty)
            click.echo(f'JSON report: {saved_json}')
        except Exception as e:
            print_error(f'Ошибка при сохранении JSON: {e}')
        return

    indent = 2 if pretty else None
    click.echo(json.dumps(result.to_dict(), ensure_ascii=False, indent=indent))


@cli.command('config', context_settings=CONTEXT_SETTINGS)
@click.pass_context
def show_config(ctx):
    """Показать текущую конфигурацию в JSON."""
    cfg = ctx.obj['config']
    click.echo(cfg.model_dump_json(indent=2))


if __name__ == "__main__":
    cli()
