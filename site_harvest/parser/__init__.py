"""site_harvest.parser: HTML document parsing and scope lookup."""

from site_harvest.parser.html_parser import find_element, parse_document, select_all

__all__ = ["parse_document", "find_element", "select_all"]
