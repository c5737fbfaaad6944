# site_harvest/crawler/file_store.py
"""
Content-addressed download of page assets (documents, images, media).

A file is saved once per destination name and once per content hash: the same
bytes reached through a different URL are discarded.
"""
from __future__ import annotations

import hashlib
import posixpath
from pathlib import Path
from typing import Dict, FrozenSet, Iterable, List, Optional, Set
from urllib.parse import unquote, urlsplit

from bs4.element import Tag

from site_harvest.config import CrawlerConfig
from site_harvest.crawler.fetcher import SupportsFetch
from site_harvest.crawler.models import PageNode
from site_harvest.logger import get_logger
from site_harvest.parser.html_parser import select_all
from site_harvest.utils import absolute_url, sanitize_filename

FILE_DIR = "file_content"

logger = get_logger("files")

CATEGORY_EXTENSIONS: Dict[str, FrozenSet[str]] = {
    "image": frozenset({".jpg", ".jpeg", ".png", ".gif", ".bmp", ".webp", ".svg", ".ico"}),
    "pdf": frozenset({".pdf"}),
    "word": frozenset({".doc", ".docx"}),
    "excel": frozenset({".xls", ".xlsx", ".csv"}),
    "powerpoint": frozenset({".ppt", ".pptx"}),
    "video": frozenset({".mp4", ".avi", ".mkv", ".mov", ".wmv", ".flv"}),
    "audio": frozenset({".mp3", ".wav", ".ogg", ".m4a", ".flac"}),
}


def enabled_categories(config: CrawlerConfig) -> Set[str]:
    toggles = {
        "image": config.download_images,
        "pdf": config.download_pdfs,
        "word": config.download_word,
        "excel": config.download_excel,
        "powerpoint": config.download_powerpoint,
        "video": config.download_videos,
        "audio": config.download_audios,
    }
    return {name for name, on in toggles.items() if on}


def url_extension(url: str) -> str:
    """Lowercased extension of the last path segment (``""`` if none)."""
    try:
        path = urlsplit(url).path
    except ValueError:
        return ""
    return posixpath.splitext(posixpath.basename(path))[1].lower()


def discover_assets(roots: Iterable[Tag], include_images: bool) -> List[str]:
    """Raw ``img[src]`` (when images are enabled) and ``a[href]`` references, first occurrence order."""
    roots = list(roots)
    refs: dict[str, None] = {}
    if include_images:
        for img in select_all(roots, "img[src]"):
            src = img.get("src")
            if isinstance(src, str) and src.strip():
                refs.setdefault(src.strip())
    for anchor in select_all(roots, "a[href]"):
        href = anchor.get("href")
        if isinstance(href, str) and href.strip():
            refs.setdefault(href.strip())
    return list(refs)


class FileStore:
    """Downloads assets under ``file_content/<folder path>/`` with content-hash dedup."""

    def __init__(self, config: CrawlerConfig, fetcher: SupportsFetch) -> None:
        self.config = config
        self.fetcher = fetcher
        self.root = Path(config.download_path) / FILE_DIR
        self.categories = enabled_categories(config)
        self.downloaded_hashes: Set[str] = set()
        self.saved_files: List[Path] = []

    def category_of(self, url: str) -> Optional[str]:
        """First enabled category the URL belongs to, or None."""
        ext = url_extension(url)
        for name in sorted(self.categories):
            if ext in CATEGORY_EXTENSIONS[name]:
                return name
        # PDFs behind a query string, e.g. download?file=report.pdf
        if "pdf" in self.categories and url.lower().endswith(".pdf"):
            return "pdf"
        return None

    def destination(self, url: str, owner: PageNode) -> Optional[Path]:
        try:
            path = urlsplit(url).path
        except ValueError:
            return None
        name = sanitize_filename(posixpath.basename(unquote(path)))
        if not name or name in (".", ".."):
            return None
        return self.root / owner.folder_path() / name

    async def maybe_download(self, url: str, owner: PageNode) -> Optional[Path]:
        """
        Save the asset at *url* (relative to the owner page) and return its path.

        Returns None for disabled categories, transport or filesystem errors and
        content already stored under another name.
        """
        absolute = absolute_url(owner.url, url)
        if self.category_of(absolute) is None:
            return None

        target = self.destination(absolute, owner)
        if target is None:
            logger.debug("No file name in %s", absolute)
            return None
        if target.exists():
            logger.info("  File already downloaded: %s", target.name)
            return target

        logger.info("  Downloading: %s", target.name)
        result = await self.fetcher.fetch(absolute, timeout=self.config.asset_timeout)
        if not result.ok:
            logger.warning("  Error downloading %s: %s", absolute, result.error)
            return None

        digest = hashlib.sha256(result.content).hexdigest()
        if digest in self.downloaded_hashes:
            logger.info("  Duplicate file detected - ignored: %s", target.name)
            return None

        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(result.content)
        except OSError as exc:
            logger.warning("  Cannot save %s: %s", target, exc)
            return None

        self.downloaded_hashes.add(digest)
        self.saved_files.append(target)
        logger.info("  Download successful: %s", target.name)
        return target
