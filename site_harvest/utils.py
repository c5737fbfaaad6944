# File: site_harvest/utils.py
"""site_harvest.utils: URL canonicalization, resolution and file-name helpers shared by the crawler."""

from __future__ import annotations

import hashlib
import re
from typing import Final, Sequence
from urllib.parse import urljoin, urlsplit

from site_harvest.logger import logger

__all__: Sequence[str] = (
    "normalize_url",
    "is_same_domain",
    "absolute_url",
    "is_crawlable",
    "url_fingerprint",
    "sanitize_filename",
)

_DEFAULT_PORTS: Final[dict[str, int]] = {"http": 80, "https": 443}
_CRAWLABLE_SCHEMES: Final[tuple[str, ...]] = ("http", "https")
_INVALID_FILENAME_CHARS: Final[re.Pattern[str]] = re.compile(r'[<>:"/\\|?*\x00-\x1f]')


def normalize_url(url: str) -> str:
    """Canonical dedup key: lowercase scheme and host, no default port, path only, no trailing slash.

    Never raises. Input that cannot be parsed as an absolute URL is just lowercased.
    """
    try:
        parts = urlsplit(url.strip())
        scheme = parts.scheme.lower()
        host = parts.hostname
        port = parts.port
    except ValueError:
        logger.debug("Unparsable URL kept as-is: %s", url)
        return url.lower()
    if not scheme or not host:
        return url.lower()

    netloc = f"[{host}]" if ":" in host else host
    if port is not None and port != _DEFAULT_PORTS.get(scheme):
        netloc = f"{netloc}:{port}"

    path = parts.path or "/"
    if path != "/":
        path = path.rstrip("/") or "/"

    return f"{scheme}://{netloc}{path}".lower()


def is_same_domain(first: str, second: str) -> bool:
    """True when both URLs carry the same host (case-insensitive). Parse failures yield False."""
    try:
        host_a = urlsplit(first).hostname
        host_b = urlsplit(second).hostname
    except ValueError:
        return False
    if not host_a or not host_b:
        return False
    return host_a.lower() == host_b.lower()


def absolute_url(base: str, reference: str) -> str:
    """Resolve *reference* against *base*; on failure the reference is returned unchanged."""
    try:
        return urljoin(base, reference.strip())
    except ValueError:
        logger.debug("Cannot resolve %r against %s", reference, base)
        return reference


def is_crawlable(url: str) -> bool:
    """Only absolute http(s) URLs with a host can be crawled."""
    try:
        parts = urlsplit(url)
    except ValueError:
        return False
    return parts.scheme.lower() in _CRAWLABLE_SCHEMES and bool(parts.hostname)


def url_fingerprint(url: str, length: int = 16) -> str:
    """Stable short hex fingerprint of *url*, used in text content file names."""
    return hashlib.sha256(url.encode("utf-8")).hexdigest()[:length]


def sanitize_filename(name: str) -> str:
    """Replace characters that are invalid in file names with ``_``."""
    return _INVALID_FILENAME_CHARS.sub("_", name)
