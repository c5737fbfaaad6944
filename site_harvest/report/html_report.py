# File: site_harvest/report/html_report.py
"""site_harvest.report.html_report: HTML crawl report rendered with Jinja2."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Union

from jinja2 import Environment, FileSystemLoader, select_autoescape

from site_harvest.aggregator import CrawlReport

DEFAULT_TEMPLATE_DIR = Path(__file__).parent / "templates"
TEMPLATE_NAME = "report.html.j2"


def render_html(
    report: CrawlReport,
    template_dir: Union[Path, str, None],
    output_path: Union[Path, str],
) -> Path:
    """Render the HTML report from ``report.html.j2`` and save it.

    Args:
        report: CrawlReport object.
        template_dir: directory with the Jinja2 template; None → bundled template.
        output_path: path to the resulting HTML file.

    Returns:
        Path of the saved HTML file.
    """
    template_dir = Path(template_dir) if template_dir is not None else DEFAULT_TEMPLATE_DIR
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    env = Environment(
        loader=FileSystemLoader(str(template_dir)),
        autoescape=select_autoescape(["html", "xml", "j2"]),
    )
    template = env.get_template(TEMPLATE_NAME)

    context: dict[str, Any] = {
        "start_url": report.start_url,
        "tree": report.tree,
        "total_pages": report.total_pages,
        "tree_depth": report.tree_depth,
        "visited_count": report.visited_count,
        "failed": report.failed,
        "text_files": report.text_files,
        "downloaded_files": report.downloaded_files,
    }

    output_path.write_text(template.render(**context), encoding="utf-8")
    return output_path
