# File: tests/test_cli.py
"""CLI tests (`site_harvest.cli`) using click.testing.CliRunner.
They cover `crawl`, `config`, `interactive`, `--version` and error handling.
"""
import asyncio
import importlib
import json

import pytest
from click.testing import CliRunner

from site_harvest.aggregator import build_report
from site_harvest.cli import cli
from site_harvest.crawler.models import CrawlProgress, CrawlSession, NodeState, NodeVisited, PageNode

# The package re-exports `cli`, shadowing the submodule attribute; bind the module itself.
cli_module = importlib.import_module("site_harvest.cli")


@pytest.fixture(autouse=True)
def patch_start_crawl(monkeypatch):
    """Replace start_crawl with a canned two-page crawl."""
    seen = {}

    async def fake_crawl(cfg, on_visited=None, on_progress=None):
        seen["config"] = cfg
        root = PageNode(url=str(cfg.start_url), state=NodeState.SUCCEEDED, link_count=1)
        child = root.add_child(str(cfg.start_url) + "about")
        child.state = NodeState.FAILED
        if on_visited:
            on_visited(NodeVisited(root.url, True, 1))
        if on_progress:
            on_progress(CrawlProgress(root.url, 1, 1, 0))
        if on_visited:
            on_visited(NodeVisited(child.url, False))
        session = CrawlSession(visited={root.url, child.url}, failed={child.url})
        return build_report(root, session, None, str(cfg.download_path))

    monkeypatch.setattr(cli_module, "start_crawl", fake_crawl)
    return seen


def test_version_option():
    runner = CliRunner()
    result = runner.invoke(cli, ["--version"])
    assert result.exit_code == 0
    assert "SiteHarvest" in result.output


def test_crawl_prints_events_tree_and_summary(patch_start_crawl, tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    runner = CliRunner()
    result = runner.invoke(cli, ["crawl", "https://example.com", "--max-depth", "2", "--delay", "0"])
    assert result.exit_code == 0, result.output
    assert "[Success] https://example.com/ - 1 links found" in result.output
    assert "-> Status: 1/1 links processed at depth 0" in result.output
    assert "[Failed] https://example.com/about" in result.output
    assert "  [x] https://example.com/about" in result.output
    assert "Total pages: 2" in result.output
    assert "Tree depth: 1" in result.output
    assert patch_start_crawl["config"].max_depth == 2


def test_crawl_overrides(patch_start_crawl, tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    runner = CliRunner()
    result = runner.invoke(
        cli,
        [
            "crawl", "https://example.com",
            "--section-id", "main",
            "--target-id", "a", "--target-id", "b",
            "--same-domain",
            "--output", str(tmp_path / "out"),
            "--enable", "image", "--disable", "pdf",
            "--no-tree",
        ],
    )
    assert result.exit_code == 0, result.output
    cfg = patch_start_crawl["config"]
    assert cfg.section_id == "main"
    assert cfg.target_element_ids == ["a", "b"]
    assert cfg.only_same_domain
    assert cfg.download_images and not cfg.download_pdfs
    assert cfg.download_path == tmp_path / "out"
    assert "Crawled Tree" not in result.output


def test_crawl_uses_config_file(patch_start_crawl, tmp_path):
    cfg_file = tmp_path / "config.yaml"
    cfg_file.write_text(
        json.dumps({"start_url": "https://example.com", "max_depth": 4, "only_same_domain": True}),
        encoding="utf-8",
    )
    runner = CliRunner()
    result = runner.invoke(cli, ["--config", str(cfg_file), "crawl"])
    assert result.exit_code == 0, result.output
    assert patch_start_crawl["config"].max_depth == 4
    assert patch_start_crawl["config"].only_same_domain


def test_crawl_writes_reports(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    out_json = tmp_path / "reports" / "crawl.json"
    out_html = tmp_path / "reports" / "crawl.html"
    runner = CliRunner()
    result = runner.invoke(
        cli, ["crawl", "https://example.com", "--json", str(out_json), "--html", str(out_html), "--pretty"]
    )
    assert result.exit_code == 0, result.output
    data = json.loads(out_json.read_text(encoding="utf-8"))
    assert data["total_pages"] == 2
    assert data["tree"]["children"][0]["state"] == "failed"
    assert data["failed"] == ["https://example.com/about"]
    html = out_html.read_text(encoding="utf-8")
    assert "https://example.com/about" in html
    assert "<h1>Crawl of https://example.com/</h1>" in html


def test_show_config(tmp_path):
    cfg_file = tmp_path / "default.yaml"
    cfg_file.write_text("start_url: https://example.com\nmax_depth: 3\n", encoding="utf-8")
    runner = CliRunner()
    result = runner.invoke(cli, ["--config", str(cfg_file), "config"])
    assert result.exit_code == 0, result.output
    data = json.loads(result.output)
    assert data["start_url"] == "https://example.com/"
    assert data["max_depth"] == 3


def test_missing_start_url_is_a_config_error(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    runner = CliRunner()
    result = runner.invoke(cli, ["crawl"])
    assert result.exit_code == 1
    assert "Configuration error" in result.output


def test_invalid_selector_stops_before_crawl(patch_start_crawl, tmp_path):
    cfg_file = tmp_path / "bad.yaml"
    cfg_file.write_text("start_url: https://example.com\ncontent_selector: 'p[unclosed'\n", encoding="utf-8")
    runner = CliRunner()
    result = runner.invoke(cli, ["--config", str(cfg_file), "crawl"])
    assert result.exit_code == 1
    assert "config" not in patch_start_crawl


def test_crawl_failure_exits_non_zero(monkeypatch, tmp_path):
    async def broken(cfg, on_visited=None, on_progress=None):
        await asyncio.sleep(0)
        raise RuntimeError("network down")

    monkeypatch.setattr(cli_module, "start_crawl", broken)
    monkeypatch.chdir(tmp_path)
    runner = CliRunner()
    result = runner.invoke(cli, ["crawl", "https://example.com"])
    assert result.exit_code == 1
    assert "network down" in result.output


def test_interactive(patch_start_crawl, tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    runner = CliRunner()
    result = runner.invoke(cli, ["interactive"], input="https://example.org\nmain\n3\n")
    assert result.exit_code == 0, result.output
    cfg = patch_start_crawl["config"]
    assert str(cfg.start_url) == "https://example.org/"
    assert cfg.section_id == "main"
    assert cfg.max_depth == 3
    assert "Section ID: #main" in result.output
    assert "Crawled Tree" in result.output


def test_interactive_defaults(patch_start_crawl, tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    runner = CliRunner()
    result = runner.invoke(cli, ["interactive"], input="\n\n\n")
    assert result.exit_code == 0, result.output
    cfg = patch_start_crawl["config"]
    assert str(cfg.start_url) == "https://example.com/"
    assert cfg.section_id is None
    assert cfg.max_depth == 10
