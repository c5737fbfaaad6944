# File: tests/conftest.py
from __future__ import annotations

from pathlib import Path
from typing import Callable, Dict, List, Optional, Union

import pytest

from site_harvest.config import CrawlerConfig
from site_harvest.crawler.models import FetchResult

Body = Union[str, bytes]


class FakeFetcher:
    """In-memory transport: known URLs answer 200, everything else 404."""

    def __init__(self, pages: Optional[Dict[str, Body]] = None) -> None:
        self.pages: Dict[str, Body] = dict(pages or {})
        self.calls: List[str] = []

    async def fetch(self, url: str, timeout: Optional[float] = None) -> FetchResult:
        self.calls.append(url)
        body = self.pages.get(url)
        if body is None:
            return FetchResult(url, status=404, error="HTTP 404")
        if isinstance(body, str):
            body = body.encode("utf-8")
        return FetchResult(url, status=200, content=body, encoding="utf-8")


@pytest.fixture()
def fake_fetcher() -> Callable[..., FakeFetcher]:
    """Factory: ``fake_fetcher({url: body})``."""
    return FakeFetcher


@pytest.fixture()
def make_config(tmp_path: Path) -> Callable[..., CrawlerConfig]:
    """
    Return a factory for CrawlerConfig writing under *tmp_path* with no delay.
    """

    def _make(**overrides) -> CrawlerConfig:
        data = {
            "start_url": "https://example.com/",
            "max_depth": 5,
            "delay": 0,
            "download_path": tmp_path / "downloads",
        }
        data.update(overrides)
        return CrawlerConfig(**data)

    return _make
