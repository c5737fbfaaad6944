"""site_harvest.crawler: page tree, transport, extractors, file store and the tree crawler."""

from site_harvest.crawler.crawler import TreeCrawler
from site_harvest.crawler.models import CrawlProgress, CrawlSession, NodeState, NodeVisited, PageNode

__all__ = ["TreeCrawler", "PageNode", "NodeState", "CrawlSession", "NodeVisited", "CrawlProgress"]
