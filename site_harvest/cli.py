# === FILE: site_harvest/cli.py ===
#!/usr/bin/env python3
"""
Command line entry point of the SiteHarvest crawler.

Commands:
  crawl         Crawl from a start URL and save text/files under the output folder
  config        Show the effective configuration
  interactive   Ask for the start URL, section and depth, then crawl

Common options:
  --config PATH       YAML/JSON config (default: configs/default.yaml when present)
  --log-level LEVEL   Logging level (DEBUG, INFO, ...)
  --log-file PATH     Log file (stdout only when omitted)
  --log-format FORMAT Logging format string

crawl options:
  --max-depth INT, --section-id ID, --target-id ID (repeatable), --same-domain,
  --delay SEC, --output DIR, --enable/--disable CATEGORY (repeatable),
  --json PATH, --html PATH, --template DIR, --pretty, --tree/--no-tree

Example:
  site_harvest crawl https://example.com --max-depth 2 --section-id content --json crawl.json
"""
import asyncio
import sys
from pathlib import Path

import click
from pydantic import ValidationError

from site_harvest import __version__
from site_harvest.aggregator import CrawlReport, format_tree
from site_harvest.config import load_config
from site_harvest.crawler.models import CrawlProgress, NodeVisited
from site_harvest.engine import start_crawl
from site_harvest.logger import LEVELS, init_logging
from site_harvest.report.html_report import render_html
from site_harvest.report.json_report import render_json

CONTEXT_SETTINGS = dict(help_option_names=["--help"])

CATEGORY_FIELDS = {
    "image": "download_images",
    "pdf": "download_pdfs",
    "word": "download_word",
    "excel": "download_excel",
    "powerpoint": "download_powerpoint",
    "video": "download_videos",
    "audio": "download_audios",
}


def print_error(message: str):
    click.secho(message, fg='red', err=True)
    sys.exit(1)


def _build_config(config_path, **overrides):
    try:
        return load_config(config_path, **overrides)
    except (ValidationError, ValueError, TypeError, OSError) as e:
        print_error(f'Configuration error: {e}')


def _echo_visited(event: NodeVisited) -> None:
    if event.success:
        click.echo(f'[Success] {event.url} - {event.link_count} links found')
    else:
        click.echo(f'[Failed] {event.url}')


def _echo_progress(event: CrawlProgress) -> None:
    click.echo(
        f'  -> Status: {event.processed_links}/{event.total_links} links processed at depth {event.depth}'
    )


def _run(cfg) -> CrawlReport:
    try:
        return asyncio.run(start_crawl(cfg, on_visited=_echo_visited, on_progress=_echo_progress))
    except Exception as e:
        print_error(f'Crawl failed: {e}')


def _echo_summary(report: CrawlReport, show_tree: bool) -> None:
    if show_tree and report.root is not None:
        click.echo('\n===== Crawled Tree =====')
        for line in format_tree(report.root):
            click.echo(line)
    click.echo('\n===== Final Report =====')
    click.echo(f'Total pages: {report.total_pages}')
    click.echo(f'Tree depth: {report.tree_depth}')
    click.echo(f'Failed pages: {len(report.failed)}')
    click.echo(f'Downloaded files: {len(report.downloaded_files)}')
    click.echo(f'Files in folder: {report.download_path}')


@click.group(context_settings=CONTEXT_SETTINGS)
@click.version_option(__version__, '--version', '-v', message='SiteHarvest, version %(version)s')
@click.option(
    '--config', '-c', 'config_path',
    default=None,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help='Path to a YAML/JSON configuration file.'
)
@click.option(
    '--log-level', 'log_level',
    default='INFO', show_default=True,
    type=click.Choice(LEVELS),
    help='Logging level'
)
@click.option(
    '--log-file', 'log_file',
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Log file (stdout only when omitted)'
)
@click.option(
    '--log-format', 'log_format',
    default='%(asctime)s %(levelname)s %(message)s',
    show_default=True,
    help='Logging format string'
)
@click.pass_context
def cli(ctx, config_path, log_level, log_file, log_format):
    """SiteHarvest command group."""
    init_logging(
        level=log_level,
        log_file=str(log_file) if log_file else None,
        log_format=log_format
    )
    ctx.ensure_object(dict)
    ctx.obj['config_path'] = config_path


@cli.command('crawl', context_settings=CONTEXT_SETTINGS)
@click.argument('start_url', required=False)
@click.option('--max-depth', '-d', 'max_depth', type=click.IntRange(min=0), default=None, help='Maximum crawl depth')
@click.option('--section-id', '-s', 'section_id', default=None, help='Element id limiting the start page')
@click.option('--target-id', 'target_ids', multiple=True, help='Element id to search links in (repeatable)')
@click.option('--same-domain', is_flag=True, help='Follow only links on the start host')
@click.option('--delay', type=click.FloatRange(min=0), default=None, help='Pause before each page (seconds)')
@click.option(
    '--output', '-o', 'output',
    default=None,
    type=click.Path(file_okay=False, path_type=Path),
    help='Folder for text_content/ and file_content/'
)
@click.option('--enable', 'enable', multiple=True, type=click.Choice(sorted(CATEGORY_FIELDS)), help='Download this file category')
@click.option('--disable', 'disable', multiple=True, type=click.Choice(sorted(CATEGORY_FIELDS)), help='Skip this file category')
@click.option(
    '--json', '-j', 'json_output',
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Save the JSON report to a file'
)
@click.option(
    '--html', 'html_output',
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Save the HTML report to a file'
)
@click.option(
    '--template', '-t', 'template_dir',
    default=None,
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    help='Folder with report.html.j2 (bundled template when omitted)'
)
@click.option('--pretty', is_flag=True, help='Indent JSON output')
@click.option('--tree/--no-tree', 'show_tree', default=True, show_default=True, help='Print the crawled tree')
@click.pass_context
def crawl(ctx, start_url, max_depth, section_id, target_ids, same_domain, delay, output,
          enable, disable, json_output, html_output, template_dir, pretty, show_tree):
    """Crawl from START_URL (or the configured start_url) and save what was found."""
    overrides = {
        'start_url': start_url,
        'max_depth': max_depth,
        'section_id': section_id,
        'target_element_ids': list(target_ids) or None,
        'only_same_domain': True if same_domain else None,
        'delay': delay,
        'download_path': output,
    }
    for name in enable:
        overrides[CATEGORY_FIELDS[name]] = True
    for name in disable:
        overrides[CATEGORY_FIELDS[name]] = False

    cfg = _build_config(ctx.obj['config_path'], **overrides)
    click.echo(f'Starting crawl from: {cfg.start_url}')
    report = _run(cfg)

    if json_output:
        try:
            click.echo(f'JSON report: {render_json(report, json_output, pretty=pretty)}')
        except OSError as e:
            print_error(f'Cannot save JSON report: {e}')
    if html_output:
        try:
            click.echo(f'HTML report: {render_html(report, template_dir, html_output)}')
        except Exception as e:
            print_error(f'Cannot save HTML report: {e}')

    _echo_summary(report, show_tree)


@cli.command('config', context_settings=CONTEXT_SETTINGS)
@click.argument('start_url', required=False)
@click.pass_context
def show_config(ctx, start_url):
    """Print the effective configuration as JSON."""
    cfg = _build_config(ctx.obj['config_path'], start_url=start_url)
    click.echo(cfg.model_dump_json(indent=2))


@cli.command('interactive', context_settings=CONTEXT_SETTINGS)
@click.pass_context
def interactive(ctx):
    """Ask for the crawl settings, run the crawl and print the tree."""
    start_url = click.prompt('Enter input link', default='https://example.com')
    section_id = click.prompt('Limit to a specific section by ID? (optional)', default='', show_default=False)
    max_depth = click.prompt('Maximum crawling depth', type=click.IntRange(min=0), default=10)

    cfg = _build_config(
        ctx.obj['config_path'],
        start_url=start_url.strip(),
        section_id=section_id.strip() or None,
        max_depth=max_depth,
    )

    click.echo('\nStarting crawl with the following settings:')
    click.echo(f'   URL: {cfg.start_url}')
    if cfg.section_id:
        click.echo(f'   Section ID: #{cfg.section_id}')
    click.echo(f'   Max Depth: {cfg.max_depth}')
    for name, field_name in CATEGORY_FIELDS.items():
        click.echo(f'   Download {name}: {"yes" if getattr(cfg, field_name) else "no"}')
    click.echo(f'   Storage Folder: {cfg.download_path}\n')

    report = _run(cfg)
    _echo_summary(report, show_tree=True)


if __name__ == "__main__":
    cli()
