# site_harvest/crawler/models.py
"""
Data models for the SiteHarvest crawler: fetch results, the page tree,
per-session tracking state and progress events.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Set
from urllib.parse import urlsplit

_SEGMENT_PATH_LIMIT = 30


@dataclass(slots=True)
class FetchResult:
    """Outcome of one transport call. ``error`` is set for network, timeout and HTTP-status failures."""

    url: str
    status: Optional[int] = None
    content: bytes = b""
    encoding: Optional[str] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.status is not None and 200 <= self.status < 300

    def text(self) -> str:
        try:
            return self.content.decode(self.encoding or "utf-8", errors="replace")
        except LookupError:
            # unknown charset announced by the server
            return self.content.decode("utf-8", errors="replace")


class NodeState(str, Enum):
    PENDING = "pending"
    VISITING = "visiting"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    DEPTH_EXCEEDED = "depth_exceeded"
    DUPLICATE_SKIPPED = "duplicate_skipped"


@dataclass(eq=False)
class PageNode:
    """One crawled (or pending) page. The tree is append-only for the duration of a crawl."""

    url: str
    depth: int = 0
    parent: Optional[PageNode] = field(default=None, repr=False)
    children: List[PageNode] = field(default_factory=list, repr=False)
    content: Optional[str] = field(default=None, repr=False)
    crawled_at: Optional[datetime] = None
    state: NodeState = NodeState.PENDING
    link_count: int = 0
    text_file: Optional[Path] = None
    files: List[Path] = field(default_factory=list)

    def add_child(self, url: str) -> PageNode:
        child = PageNode(url=url, depth=self.depth + 1, parent=self)
        self.children.append(child)
        return child

    @property
    def is_final(self) -> bool:
        """A succeeded page without outgoing links."""
        return self.state is NodeState.SUCCEEDED and self.link_count == 0

    @property
    def total_descendants(self) -> int:
        return sum(1 + child.total_descendants for child in self.children)

    def walk(self) -> Iterator[PageNode]:
        """Pre-order traversal of the subtree rooted at this node."""
        yield self
        for child in self.children:
            yield from child.walk()

    def lineage(self) -> List[PageNode]:
        """Nodes from the root down to (and including) this one."""
        path: List[PageNode] = []
        current: Optional[PageNode] = self
        while current is not None:
            path.append(current)
            current = current.parent
        path.reverse()
        return path

    def folder_segment(self) -> str:
        """Directory name of this page: ``host_with_underscores[_path_prefix]``."""
        try:
            parts = urlsplit(self.url)
            host = parts.hostname
        except ValueError:
            return "unknown"
        if not host:
            return "unknown"
        host = host.replace(".", "_")
        path = parts.path.lstrip("/").replace("/", "_")[:_SEGMENT_PATH_LIMIT]
        return f"{host}_{path}" if path else host

    def folder_path(self) -> str:
        """Lineage path used to lay out saved artifacts on disk."""
        return "/".join(node.folder_segment() for node in self.lineage())

    def to_dict(self) -> Dict[str, Any]:
        return {
            "url": self.url,
            "depth": self.depth,
            "state": self.state.value,
            "crawled_at": self.crawled_at.isoformat() if self.crawled_at else None,
            "link_count": self.link_count,
            "text_file": str(self.text_file) if self.text_file else None,
            "files": [str(p) for p in self.files],
            "children": [child.to_dict() for child in self.children],
        }


@dataclass(slots=True)
class NodeOutcome:
    """Result of processing one page: the final state plus discovered links or a failure reason."""

    state: NodeState
    links: List[str] = field(default_factory=list)
    reason: Optional[str] = None


@dataclass(slots=True)
class CrawlSession:
    """Tracking sets of one crawl run. ``visited`` holds normalized URLs, ``failed`` the original ones."""

    visited: Set[str] = field(default_factory=set)
    failed: Set[str] = field(default_factory=set)


@dataclass(slots=True, frozen=True)
class NodeVisited:
    url: str
    success: bool
    link_count: int = 0


@dataclass(slots=True, frozen=True)
class CrawlProgress:
    current_url: str
    total_links: int
    processed_links: int
    depth: int
