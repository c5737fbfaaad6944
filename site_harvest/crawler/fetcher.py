# site_harvest/crawler/fetcher.py
"""
Fetcher module: HTTP GET of pages and files with a per-request timeout.
Transport failures are reported in the returned FetchResult, never raised.
"""
from __future__ import annotations

import asyncio
from typing import Any, Dict, Optional, Protocol

from aiohttp import ClientError, ClientSession, ClientTimeout

from site_harvest.config import CrawlerConfig
from site_harvest.crawler.models import FetchResult
from site_harvest.logger import get_logger


logger = get_logger("fetcher")


class SupportsFetch(Protocol):
    async def fetch(self, url: str, timeout: Optional[float] = None) -> FetchResult: ...


def open_session(config: CrawlerConfig) -> ClientSession:
    """Client session carrying the configured User-Agent and page timeout."""
    return ClientSession(
        timeout=ClientTimeout(total=config.timeout),
        headers={"User-Agent": config.user_agent},
        raise_for_status=False,
    )


class Fetcher:
    """Handles HTTP fetching over a shared aiohttp session."""

    def __init__(self, session: ClientSession) -> None:
        self.session = session

    async def fetch(self, url: str, timeout: Optional[float] = None) -> FetchResult:
        """
        Download *url* and return its body.

        A non-2xx status, a network error or a timeout produce a result with ``error`` set.
        """
        kwargs: Dict[str, Any] = {}
        if timeout is not None:
            kwargs["timeout"] = ClientTimeout(total=timeout)
        try:
            async with self.session.get(url, **kwargs) as resp:
                if not 200 <= resp.status < 300:
                    return FetchResult(url, status=resp.status, error=f"HTTP {resp.status}")
                data = await resp.read()
                return FetchResult(url, status=resp.status, content=data, encoding=resp.charset)
        except asyncio.TimeoutError:
            logger.debug("Timeout fetching %s", url)
            return FetchResult(url, error="timeout")
        except ClientError as exc:
            logger.debug("Transport error for %s: %s", url, exc)
            return FetchResult(url, error=str(exc) or type(exc).__name__)
