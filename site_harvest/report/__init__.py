# File: site_harvest/report/__init__.py
"""site_harvest.report: JSON and HTML crawl reports used by the CLI and tests."""

from site_harvest.report.html_report import DEFAULT_TEMPLATE_DIR, render_html
from site_harvest.report.json_report import render_json

__all__ = ["render_json", "render_html", "DEFAULT_TEMPLATE_DIR"]
