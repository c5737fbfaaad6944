# === FILE: site_harvest/parser/html_parser.py ===
"""HTML parsing utilities for SiteHarvest.

Scope handling goes through three
small helpers so that scoping behaves the same in every extraction pass:

* :func:`parse_document`: markup to a queryable document. Markup the parser
  rejects degrades to an empty document instead of failing the page.
* :func:`find_element`: element lookup by ``id`` (section and target scopes).
* :func:`select_all`: CSS query over a list of scope roots, in document order
  per root.
"""
from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import Optional

from bs4 import BeautifulSoup
from bs4.builder import ParserRejectedMarkup
from bs4.element import Tag

from site_harvest.logger import logger

__all__: Sequence[str] = ("parse_document", "find_element", "select_all")

_PARSER = "html.parser"


def parse_document(html: str) -> BeautifulSoup:
    """Parse *html*; rejected markup yields an empty document."""
    try:
        return BeautifulSoup(html, _PARSER)
    except ParserRejectedMarkup as exc:
        logger.warning("Malformed HTML ignored: %s", exc)
        return BeautifulSoup("", _PARSER)


def find_element(document: BeautifulSoup, element_id: str) -> Optional[Tag]:
    """Return the element with ``id == element_id`` or None."""
    found = document.find(id=element_id)
    return found if isinstance(found, Tag) else None


def select_all(roots: Iterable[Tag], selector: str) -> list[Tag]:
    """Every descendant of each root matching *selector*."""
    matches: list[Tag] = []
    for root in roots:
        matches.extend(root.select(selector))
    return matches
