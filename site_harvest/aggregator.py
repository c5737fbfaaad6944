# File: site_harvest/aggregator.py
"""site_harvest.aggregator: summary of a finished crawl (page tree, counters, saved files)."""

from __future__ import annotations

import json
from dataclasses import dataclass, field, fields
from typing import Any, Dict, List, Optional

from site_harvest.crawler.file_store import FileStore
from site_harvest.crawler.models import CrawlSession, NodeState, PageNode

_STATE_MARKS: Dict[NodeState, str] = {
    NodeState.PENDING: "?",
    NodeState.VISITING: "~",
    NodeState.SUCCEEDED: "+",
    NodeState.FAILED: "x",
    NodeState.DEPTH_EXCEEDED: ">",
    NodeState.DUPLICATE_SKIPPED: "=",
}


@dataclass(slots=True)
class CrawlReport:
    """Crawl results: the page tree plus totals and saved artifacts."""

    start_url: str = ""
    tree: Dict[str, Any] = field(default_factory=dict)
    total_pages: int = 0
    tree_depth: int = 0
    visited_count: int = 0
    failed: List[str] = field(default_factory=list)
    text_files: List[str] = field(default_factory=list)
    downloaded_files: List[str] = field(default_factory=list)
    download_path: str = ""

    root: Optional[PageNode] = None

    def json(self, *, pretty: bool = False) -> str:
        """JSON form of the report without the live node objects."""
        output = {f.name: getattr(self, f.name) for f in fields(self) if f.name != "root"}
        return json.dumps(output, ensure_ascii=False, indent=2 if pretty else None)


def build_report(
    root: PageNode,
    session: CrawlSession,
    file_store: Optional[FileStore] = None,
    download_path: str = "",
) -> CrawlReport:
    """Fold a crawled tree and its session into a CrawlReport."""
    nodes = list(root.walk())
    return CrawlReport(
        start_url=root.url,
        tree=root.to_dict(),
        total_pages=len(nodes),
        tree_depth=max(node.depth for node in nodes),
        visited_count=len(session.visited),
        failed=sorted(session.failed),
        text_files=[str(n.text_file) for n in nodes if n.text_file is not None],
        downloaded_files=[str(p) for p in file_store.saved_files] if file_store else [],
        download_path=download_path,
        root=root,
    )


def format_tree(root: PageNode) -> List[str]:
    """Indented one-line-per-node rendering of the tree."""
    return [f"{'  ' * node.depth}[{_STATE_MARKS[node.state]}] {node.url}" for node in root.walk()]
