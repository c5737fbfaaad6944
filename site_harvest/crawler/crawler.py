# === FILE: site_harvest/crawler/crawler.py ===
from __future__ import annotations

import asyncio
import time
from datetime import datetime
from typing import Callable, List, Optional

from aiohttp import ClientSession
from bs4 import BeautifulSoup
from bs4.element import Tag

from site_harvest.config import CrawlerConfig
from site_harvest.crawler.content_extractor import ContentExtractor, save_content
from site_harvest.crawler.fetcher import Fetcher, SupportsFetch, open_session
from site_harvest.crawler.file_store import FileStore, discover_assets
from site_harvest.crawler.link_extractor import LinkExtractor
from site_harvest.crawler.models import (
    CrawlProgress,
    CrawlSession,
    NodeOutcome,
    NodeState,
    NodeVisited,
    PageNode,
)
from site_harvest.logger import logger
from site_harvest.parser.html_parser import find_element, parse_document
from site_harvest.utils import normalize_url

__all__ = ("TreeCrawler",)

VisitedHandler = Callable[[NodeVisited], None]
ProgressHandler = Callable[[CrawlProgress], None]


class TreeCrawler:
    """
    Depth-bounded, strictly sequential crawler that builds a PageNode tree.

    Children are visited one at a time with ``config.delay`` seconds of pause
    before each descent. A page that fails never stops its siblings.
    """

    def __init__(
        self,
        config: CrawlerConfig,
        *,
        fetcher: Optional[SupportsFetch] = None,
        session: Optional[CrawlSession] = None,
        file_store: Optional[FileStore] = None,
        on_visited: Optional[VisitedHandler] = None,
        on_progress: Optional[ProgressHandler] = None,
    ) -> None:
        self.config = config
        self.fetcher = fetcher
        self.session = session if session is not None else CrawlSession()
        self.file_store = file_store
        self.on_visited = on_visited
        self.on_progress = on_progress
        self.link_extractor = LinkExtractor(config)
        self.content_extractor = ContentExtractor(config)
        self._client: Optional[ClientSession] = None

    async def __aenter__(self) -> TreeCrawler:
        if self.fetcher is None:
            self._client = open_session(self.config)
            self.fetcher = Fetcher(self._client)
        if self.file_store is None:
            self.file_store = FileStore(self.config, self.fetcher)
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        if self._client and not self._client.closed:
            await self._client.close()

    async def crawl(self) -> PageNode:
        if self.fetcher is None or self.file_store is None:
            raise RuntimeError("Crawler not opened; use 'async with TreeCrawler(...)'")
        root = PageNode(url=str(self.config.start_url), depth=0)
        logger.info("Starting crawl from: %s", root.url)
        start = time.monotonic()
        await self._crawl_node(root)
        logger.info(
            "Crawl finished in %.2f s: %d pages visited, %d failed",
            time.monotonic() - start,
            len(self.session.visited),
            len(self.session.failed),
        )
        return root

    async def _crawl_node(self, node: PageNode) -> None:
        indent = "  " * node.depth
        if node.depth >= self.config.max_depth:
            node.state = NodeState.DEPTH_EXCEEDED
            logger.debug("%sReached maximum depth %d: %s", indent, node.depth, node.url)
            return

        key = normalize_url(node.url)
        if key in self.session.visited:
            node.state = NodeState.DUPLICATE_SKIPPED
            logger.info("%sDuplicate URL - skipped: %s", indent, node.url)
            return

        # committed before the fetch so later siblings see it at once
        self.session.visited.add(key)
        node.state = NodeState.VISITING
        node.crawled_at = datetime.now()
        logger.info("%s[%d] Crawling: %s", indent, node.depth, node.url)

        outcome = await self._process(node)
        node.state = outcome.state
        if outcome.state is NodeState.FAILED:
            self.session.failed.add(node.url)
            logger.warning("%sFailed %s: %s", indent, node.url, outcome.reason)
            self._emit_visited(NodeVisited(node.url, success=False))
            return

        links = outcome.links
        node.link_count = len(links)
        self._emit_visited(NodeVisited(node.url, success=True, link_count=len(links)))
        if not links:
            logger.info("%sFinal page: %s", indent, node.url)
            return

        new_links = self._unvisited(links)
        logger.info(
            "%s   %d links found, %d duplicates, %d new",
            indent,
            len(links),
            len(links) - len(new_links),
            len(new_links),
        )
        for link in new_links:
            child = node.add_child(link)
            self._emit_progress(CrawlProgress(node.url, len(new_links), len(node.children), node.depth))
            await asyncio.sleep(self.config.delay)
            await self._crawl_node(child)

    async def _process(self, node: PageNode) -> NodeOutcome:
        """Fetch and extract one page; any failure becomes a FAILED outcome."""
        if self.fetcher is None or self.file_store is None:
            raise RuntimeError("Crawler not opened; use 'async with TreeCrawler(...)'")
        try:
            result = await self.fetcher.fetch(node.url)
            if not result.ok:
                return NodeOutcome(NodeState.FAILED, reason=result.error or "fetch failed")
            html = result.text()
            if not html:
                return NodeOutcome(NodeState.FAILED, reason="empty content")
            node.content = html

            document = parse_document(html)
            section = self._section_scope(node, document)
            roots: List[Tag] = [section] if section is not None else [document]

            self._save_text(node, roots)
            for ref in discover_assets(roots, include_images=self.config.download_images):
                saved = await self.file_store.maybe_download(ref, node)
                if saved is not None and saved not in node.files:
                    node.files.append(saved)

            links = self.link_extractor.extract(self._link_scope(document, section), node.url)
            return NodeOutcome(NodeState.SUCCEEDED, links=links)
        except Exception as exc:
            logger.error("Error crawling %s: %s", node.url, exc)
            return NodeOutcome(NodeState.FAILED, reason=str(exc) or type(exc).__name__)

    def _section_scope(self, node: PageNode, document: BeautifulSoup) -> Optional[Tag]:
        section_id = self.config.section_id
        if node.depth != 0 or not section_id:
            return None
        section = find_element(document, section_id)
        if section is None:
            logger.warning("  Section with ID '#%s' not found, using the whole page", section_id)
        else:
            logger.info("  Limiting crawl to section: #%s", section_id)
        return section

    def _link_scope(self, document: BeautifulSoup, section: Optional[Tag]) -> List[Tag]:
        if section is not None:
            return [section]
        if self.config.section_id or not self.config.target_element_ids:
            return [document]
        roots: List[Tag] = []
        for element_id in self.config.target_element_ids:
            target = find_element(document, element_id)
            if target is None:
                logger.debug("  Element with ID '%s' not found", element_id)
                continue
            roots.append(target)
        return roots

    def _save_text(self, node: PageNode, roots: List[Tag]) -> None:
        passages = self.content_extractor.extract(roots)
        if not passages:
            return
        try:
            node.text_file = save_content(self.config.download_path, node, passages)
        except OSError as exc:
            logger.warning("  Cannot save text content of %s: %s", node.url, exc)
            return
        logger.info("  Text content saved: %s", node.text_file.name)

    def _unvisited(self, links: List[str]) -> List[str]:
        """Links whose normalized form is neither visited nor repeated in *links*."""
        fresh: List[str] = []
        seen: set[str] = set()
        for link in links:
            key = normalize_url(link)
            if key in self.session.visited or key in seen:
                continue
            seen.add(key)
            fresh.append(link)
        return fresh

    def _emit_visited(self, event: NodeVisited) -> None:
        if self.on_visited is None:
            return
        try:
            self.on_visited(event)
        except Exception:
            logger.exception("Visited handler failed for %s", event.url)

    def _emit_progress(self, event: CrawlProgress) -> None:
        if self.on_progress is None:
            return
        try:
            self.on_progress(event)
        except Exception:
            logger.exception("Progress handler failed for %s", event.current_url)
