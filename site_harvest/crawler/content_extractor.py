# site_harvest/crawler/content_extractor.py
"""
Text passage extraction and the ``text_content`` writer.
"""
from __future__ import annotations

from pathlib import Path
from typing import Iterable, List

from bs4.element import Tag

from site_harvest.config import CrawlerConfig
from site_harvest.crawler.models import PageNode
from site_harvest.parser.html_parser import select_all
from site_harvest.utils import url_fingerprint

MIN_PASSAGE_LENGTH = 10
TEXT_DIR = "text_content"


class ContentExtractor:
    """Trimmed text of every element matching the content selector."""

    def __init__(self, config: CrawlerConfig) -> None:
        self.config = config

    def extract(self, roots: Iterable[Tag]) -> List[str]:
        passages: List[str] = []
        for element in select_all(roots, self.config.content_selector):
            text = element.get_text().strip()
            # shorter fragments are stray whitespace, icons and the like
            if len(text) > MIN_PASSAGE_LENGTH:
                passages.append(text)
        return passages


def save_content(root: Path, node: PageNode, passages: List[str]) -> Path:
    """Write *passages* to ``text_content/<folder path>/content_<url hash>.txt``.

    Raises OSError when the folder or the file cannot be written.
    """
    target = Path(root) / TEXT_DIR / node.folder_path() / f"content_{url_fingerprint(node.url)}.txt"
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text("\n\n".join(passages), encoding="utf-8")
    return target
