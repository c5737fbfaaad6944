# site_harvest/report/json_report.py

"""
JSON report generation for SiteHarvest.

Serializes a CrawlReport to a file.
"""
from pathlib import Path

from site_harvest.aggregator import CrawlReport


def render_json(report: CrawlReport, output_path: Path | str, *, pretty: bool = True) -> Path:
    """
    Save *report* as JSON at *output_path* and return the path.

    Example:
    ```python
    from site_harvest.report.json_report import render_json
    report_path = render_json(report, 'reports/crawl.json')
    print(f"JSON report saved to: {report_path}")
    ```
    """
    output = Path(output_path)
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(report.json(pretty=pretty), encoding="utf-8")
    return output
