# File: tests/test_file_store.py
from __future__ import annotations

import pytest

from site_harvest.crawler.file_store import FileStore, discover_assets, url_extension
from site_harvest.crawler.models import PageNode
from site_harvest.parser.html_parser import parse_document

PAYLOAD = bytes(range(256)) * 4  # 1024 bytes
OWNER_URL = "https://example.com/docs/"


@pytest.fixture()
def owner() -> PageNode:
    return PageNode(url=OWNER_URL)


def test_url_extension():
    assert url_extension("https://example.com/a/Report.PDF?x=1") == ".pdf"
    assert url_extension("https://example.com/a.b/file") == ""
    assert url_extension("https://example.com/") == ""


def test_category_matching(make_config, fake_fetcher):
    store = FileStore(make_config(download_images=True), fake_fetcher())
    assert store.category_of("https://example.com/a.JPG") == "image"
    assert store.category_of("https://example.com/a.docx") == "word"
    assert store.category_of("https://example.com/a.csv") == "excel"
    assert store.category_of("https://example.com/get?file=report.pdf") == "pdf"
    assert store.category_of("https://example.com/a.mp4") is None
    assert store.category_of("https://example.com/page.html") is None


@pytest.mark.asyncio()
async def test_identical_content_is_stored_once(make_config, fake_fetcher, owner):
    fetcher = fake_fetcher({
        "https://example.com/img/one.png": PAYLOAD,
        "https://example.com/img/two.png": PAYLOAD,
    })
    store = FileStore(make_config(download_images=True), fetcher)

    first = await store.maybe_download("/img/one.png", owner)
    second = await store.maybe_download("/img/two.png", owner)

    assert first is not None and first.read_bytes() == PAYLOAD
    assert second is None
    assert len(store.downloaded_hashes) == 1
    files = [p for p in (store.root).rglob("*") if p.is_file()]
    assert files == [first]


@pytest.mark.asyncio()
async def test_destination_follows_owner_folder_path(make_config, fake_fetcher, owner, tmp_path):
    fetcher = fake_fetcher({"https://example.com/docs/annual%20report.pdf": b"%PDF-1.4"})
    store = FileStore(make_config(), fetcher)
    saved = await store.maybe_download("annual%20report.pdf", owner)
    assert saved == tmp_path / "downloads" / "file_content" / "example_com_docs_" / "annual report.pdf"


@pytest.mark.asyncio()
async def test_existing_file_short_circuits_fetch(make_config, fake_fetcher, owner):
    fetcher = fake_fetcher()
    store = FileStore(make_config(), fetcher)
    target = store.destination("https://example.com/docs/old.pdf", owner)
    target.parent.mkdir(parents=True)
    target.write_bytes(b"cached")

    assert await store.maybe_download("old.pdf", owner) == target
    assert fetcher.calls == []


@pytest.mark.asyncio()
async def test_disabled_category_is_not_fetched(make_config, fake_fetcher, owner):
    fetcher = fake_fetcher({"https://example.com/docs/pic.png": PAYLOAD})
    store = FileStore(make_config(download_images=False), fetcher)
    assert await store.maybe_download("pic.png", owner) is None
    assert fetcher.calls == []


@pytest.mark.asyncio()
async def test_transport_failure_leaves_no_trace(make_config, fake_fetcher, owner):
    store = FileStore(make_config(), fake_fetcher())
    assert await store.maybe_download("missing.pdf", owner) is None
    assert store.downloaded_hashes == set()
    assert not store.root.exists()


@pytest.mark.asyncio()
async def test_filesystem_error_is_a_failed_download(make_config, fake_fetcher, owner, tmp_path):
    blocker = tmp_path / "blocked"
    blocker.write_text("a file where a folder is needed")
    fetcher = fake_fetcher({"https://example.com/docs/a.pdf": b"data"})
    store = FileStore(make_config(download_path=blocker), fetcher)
    assert await store.maybe_download("a.pdf", owner) is None
    assert store.downloaded_hashes == set()


def test_discover_assets_respects_image_toggle():
    doc = parse_document('<img src="/a.png"><img src=""><a href="/b.pdf">b</a><a href="/b.pdf">again</a>')
    assert discover_assets([doc], include_images=False) == ["/b.pdf"]
    assert discover_assets([doc], include_images=True) == ["/a.png", "/b.pdf"]
