# === FILE: site_crawler/cli.py ===
#!/usr/bin/env python3
"""
Command-line entry point for SiteCrawler.

Usage:
  site-crawler [OPTIONS] URL

Crawl options:
  --concurrency N           Maximum number of concurrent requests
  --maxRequestsPerSecond N  Maximum number of requests started per second
  --followDepth N           Maximum depth of links to follow
  --timeout MS              Stop the whole crawl after MS milliseconds

General options:
  --config PATH       YAML/JSON file with crawl settings (flags win)
  --json PATH         Save the run summary as JSON
  --log-level LEVEL   Logging level (DEBUG, INFO, ...)
  --log-file PATH     Log file (stderr only when omitted)
  --module-log-level NAME=LEVEL
                      Level for one component (scheduler, crawler, fetcher, ...)
  --version, -v       Show the SiteCrawler version

Example:
  site-crawler --concurrency 5 --maxRequestsPerSecond 10 --followDepth 3 --timeout 5000 https://example.com
"""
import asyncio
import math
import sys
from pathlib import Path

import click

from site_crawler import __version__
from site_crawler.config import load_config
from site_crawler.engine import start_crawl
from site_crawler.logger import init_logging, parse_module_levels
from site_crawler.report.json_report import render_json
from site_crawler.utils import normalize_url

CONTEXT_SETTINGS = dict(help_option_names=["--help"])


def print_error(message: str):
    click.secho(message, fg='red', err=True)
    sys.exit(1)


def _module_levels(ctx, param, value):
    try:
        return parse_module_levels(value)
    except ValueError as e:
        raise click.BadParameter(str(e))


def _non_negative(ctx, param, value):
    if value is None:
        return value
    if not math.isfinite(value) or value < 0:
        raise click.BadParameter(f'Invalid value: {value}, must be a non-negative number')
    return value


@click.command(context_settings=CONTEXT_SETTINGS)
@click.version_option(__version__, '--version', '-v', message='SiteCrawler, version %(version)s')
@click.argument('url')
@click.option(
    '--concurrency', 'concurrency',
    type=int, default=None, callback=_non_negative,
    help='Maximum number of concurrent requests'
)
@click.option(
    '--maxRequestsPerSecond', 'max_rps',
    type=float, default=None, callback=_non_negative,
    help='Maximum number of requests per second'
)
@click.option(
    '--followDepth', 'follow_depth',
    type=int, default=None, callback=_non_negative,
    help='Maximum depth to follow links'
)
@click.option(
    '--timeout', 'timeout_ms',
    type=float, default=None, callback=_non_negative,
    help='Timeout for the whole crawl in milliseconds (0 disables it)'
)
@click.option(
    '--config', '-c', 'config_path',
    default=None,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help='Path to a YAML/JSON configuration file.'
)
@click.option(
    '--json', '-j', 'json_output',
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Save the crawl summary as JSON'
)
@click.option(
    '--log-level', 'log_level',
    default='WARNING', show_default=True,
    type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']),
    help='Logging level'
)
@click.option(
    '--log-file', 'log_file',
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Log file path (stderr if omitted)'
)
@click.option(
    '--module-log-level', 'module_levels',
    multiple=True, callback=_module_levels, metavar='NAME=LEVEL',
    help='Level for one component, e.g. scheduler=DEBUG (repeatable)'
)
def cli(
    url, concurrency, max_rps, follow_depth, timeout_ms, config_path, json_output, log_level, log_file, module_levels
):
    """Crawl every page reachable from URL on the same host."""
    init_logging(
        level=log_level,
        log_file=str(log_file) if log_file else None,
        module_levels=module_levels,
    )
    try:
        cfg = load_config(config_path).with_overrides(
            max_concurrent_requests=concurrency,
            max_requests_per_second=max_rps,
            max_depth=follow_depth,
            timeout_ms=timeout_ms,
        )
    except Exception as e:
        print_error(f'Configuration error: {e}')

    if normalize_url(url) is None:
        print_error(f'Error: invalid URL {url!r}, expected an absolute http(s) URL.')

    def on_visited(page, urls):
        click.echo(f'- {page}')
        for u in urls:
            click.echo(f' = {u}')

    def on_error(page, error):
        click.echo(f'Error while visiting URL: {page}, {error}', err=True)

    try:
        report = asyncio.run(start_crawl(cfg, url, on_visited=on_visited, on_error=on_error))
    except Exception as e:
        print_error(f'Crawl failed: {e}')

    if report.timed_out:
        click.secho('Timeout limit reached, crawl stopped early', fg='yellow', err=True)
    if report.dead_letters:
        click.secho(f'{len(report.dead_letters)} URL(s) failed after all retries:', fg='yellow', err=True)
        for dead in report.dead_letters:
            click.secho(f'  {dead}', fg='yellow', err=True)

    if json_output:
        try:
            saved_json = render_json(report, json_output)
            click.echo(f'JSON report: {saved_json}')
        except Exception as e:
            print_error(f'Failed to save JSON report: {e}')


if __name__ == "__main__":
    cli()
