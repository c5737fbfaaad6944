# === FILE: site_harvest/config.py ===
"""
Loading and validation of the SiteHarvest crawler configuration.
The schema is described with Pydantic; selectors are compiled up front so that
a broken selector stops the run before the first page is fetched.
"""
from __future__ import annotations

import errno
import json
import os
from pathlib import Path
from typing import Any, List, Optional, Union

import soupsieve
import yaml
from pydantic import BaseModel, ConfigDict, Field, HttpUrl, field_validator

DEFAULT_LINK_SELECTOR = "a[href], a.next, a.page-link, .pagination a"
DEFAULT_ITEM_LIST_SELECTOR = "ul, ol, .items, .list, .content-list, article, .post, .product-list"
DEFAULT_ITEM_SELECTOR = "li, .item, .entry, .post-item, .product"
DEFAULT_CONTENT_SELECTOR = "p, div.content, article, .post-content, .entry-content, main"


class CrawlerConfig(BaseModel):
    """Configuration of a single crawl run. Immutable once built."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    start_url: HttpUrl = Field(..., description="Seed page of the crawl.")
    section_id: Optional[str] = Field(None, description="Element id limiting the seed page extraction.")
    target_element_ids: List[str] = Field(
        default_factory=list, description="Element ids whose subtrees are searched for links."
    )

    link_selector: str = Field(DEFAULT_LINK_SELECTOR, min_length=1)
    item_list_selector: str = Field(DEFAULT_ITEM_LIST_SELECTOR, min_length=1)
    item_selector: str = Field(DEFAULT_ITEM_SELECTOR, min_length=1)
    content_selector: str = Field(DEFAULT_CONTENT_SELECTOR, min_length=1)

    download_images: bool = False
    download_pdfs: bool = True
    download_word: bool = True
    download_excel: bool = True
    download_powerpoint: bool = True
    download_videos: bool = False
    download_audios: bool = False

    only_same_domain: bool = Field(False, description="Follow only links on the seed host.")
    max_depth: int = Field(10, ge=0, description="Maximum crawl depth.")
    delay: float = Field(0.5, ge=0, description="Pause before each descent (seconds).")
    download_path: Path = Field(Path("downloads"), description="Root folder for saved artifacts.")
    timeout: float = Field(30.0, gt=0, description="Page request timeout (seconds).")
    asset_timeout: float = Field(60.0, gt=0, description="File download timeout (seconds).")
    user_agent: str = Field("SiteHarvestBot/1.0", min_length=1, description="User-Agent header.")

    @field_validator("section_id", mode="before")
    def _blank_section_is_none(cls, v: Any) -> Any:
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("target_element_ids")
    def _drop_blank_ids(cls, v: List[str]) -> List[str]:
        return [i.strip() for i in v if i.strip()]

    @field_validator("link_selector", "item_list_selector", "item_selector", "content_selector")
    def _selector_compiles(cls, v: str) -> str:
        try:
            soupsieve.compile(v)
        except soupsieve.SelectorSyntaxError as exc:
            raise ValueError(f"invalid CSS selector {v!r}: {exc}") from exc
        return v


_DEFAULT_CFG = Path("configs/default.yaml")


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as exc:
        raise ValueError(f"Malformed YAML in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise TypeError(f"Top level of YAML must be a mapping, got {type(data).__name__}")
    return data


def _read_json(path: Path) -> dict[str, Any]:
    try:
        data = json.loads(path.read_text(encoding="utf-8")) or {}
    except json.JSONDecodeError as exc:
        raise ValueError(f"Malformed JSON in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise TypeError(f"Top level of JSON must be a mapping, got {type(data).__name__}")
    return data


def read_config_file(path: Union[str, Path, None]) -> dict[str, Any]:
    """
    Return the raw mapping stored in a YAML or JSON config file.
    With *path* None the default ``configs/default.yaml`` is used when present,
    otherwise an empty mapping is returned.
    """
    if path is None:
        if not _DEFAULT_CFG.is_file():
            return {}
        path_obj = _DEFAULT_CFG
    else:
        path_obj = Path(path).expanduser().resolve()
        if not path_obj.is_file():
            raise FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), str(path_obj))

    suffix = path_obj.suffix.lower()
    if suffix in (".yaml", ".yml"):
        return _read_yaml(path_obj)
    if suffix == ".json":
        return _read_json(path_obj)
    raise ValueError(f"Unsupported config format: {suffix}")


def load_config(path: Union[str, Path, None] = None, **overrides: Any) -> CrawlerConfig:
    """
    Read YAML or JSON, apply non-None *overrides* and return a validated CrawlerConfig.
    Raises pydantic.ValidationError for a missing start URL or a bad selector.
    """
    data = read_config_file(path)
    data.update({k: v for k, v in overrides.items() if v is not None})
    return CrawlerConfig(**data)
