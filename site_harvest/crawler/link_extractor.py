# site_harvest/crawler/link_extractor.py
"""
Link extraction for SiteHarvest: direct links plus the first anchor of every list item.
"""
from __future__ import annotations

from typing import Iterable, List, Optional

from bs4.element import Tag

from site_harvest.config import CrawlerConfig
from site_harvest.logger import logger
from site_harvest.parser.html_parser import select_all
from site_harvest.utils import absolute_url, is_crawlable, is_same_domain


class LinkExtractor:
    """Collects crawlable absolute links inside the given scope roots."""

    def __init__(self, config: CrawlerConfig) -> None:
        self.config = config
        self.seed_url = str(config.start_url)

    def extract(self, roots: Iterable[Tag], base_url: str) -> List[str]:
        """
        Return absolute URLs found under *roots*, deduplicated in first-occurrence order.

        Two passes are unioned: elements matching the link selector, and the first
        ``<a>`` of each item (item selector) inside each list (item-list selector).
        """
        roots = list(roots)
        found: dict[str, None] = {}

        for element in select_all(roots, self.config.link_selector):
            url = self._accept(element, base_url)
            if url is not None:
                found.setdefault(url)

        for item_list in select_all(roots, self.config.item_list_selector):
            for item in item_list.select(self.config.item_selector):
                anchor = item.find("a")
                if not isinstance(anchor, Tag):
                    continue
                url = self._accept(anchor, base_url)
                if url is not None:
                    found.setdefault(url)

        return list(found)

    def _accept(self, element: Tag, base_url: str) -> Optional[str]:
        href = element.get("href")
        if not isinstance(href, str) or not href.strip():
            return None
        url = absolute_url(base_url, href)
        if not is_crawlable(url):
            return None
        if self.config.only_same_domain and not is_same_domain(self.seed_url, url):
            logger.debug("Link outside domain ignored: %s", url)
            return None
        return url
