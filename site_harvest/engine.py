# File: site_harvest/engine.py
"""site_harvest.engine: orchestration layer that runs a crawl and aggregates its results."""

from __future__ import annotations

from typing import Optional

from site_harvest.aggregator import CrawlReport, build_report
from site_harvest.config import CrawlerConfig
from site_harvest.crawler.crawler import ProgressHandler, TreeCrawler, VisitedHandler
from site_harvest.logger import logger

__all__ = ["start_crawl"]


async def start_crawl(
    config: CrawlerConfig,
    on_visited: Optional[VisitedHandler] = None,
    on_progress: Optional[ProgressHandler] = None,
) -> CrawlReport:
    """Open an HTTP session, crawl from ``config.start_url`` and return the aggregated report."""
    logger.info("Starting crawl…")
    async with TreeCrawler(config, on_visited=on_visited, on_progress=on_progress) as crawler:
        root = await crawler.crawl()
        return build_report(root, crawler.session, crawler.file_store, str(config.download_path))
