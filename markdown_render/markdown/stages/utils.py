"""Small helpers shared by the BeautifulSoup based stages."""

from __future__ import annotations

from bs4 import BeautifulSoup, Tag

HEADING_TAGS = ("h1", "h2", "h3", "h4", "h5", "h6")

BLOCK_TAGS = frozenset(
    {
        "address",
        "article",
        "aside",
        "blockquote",
        "dd",
        "details",
        "div",
        "dl",
        "dt",
        "figcaption",
        "figure",
        "footer",
        "form",
        "h1",
        "h2",
        "h3",
        "h4",
        "h5",
        "h6",
        "header",
        "hr",
        "iframe",
        "li",
        "main",
        "nav",
        "ol",
        "p",
        "pre",
        "section",
        "table",
        "tbody",
        "td",
        "tfoot",
        "th",
        "thead",
        "tr",
        "ul",
    }
)


def get_classes(tag: Tag) -> list[str]:
    """Return the class list of a tag, whatever form bs4 stored it in."""
    existing = tag.get("class", [])
    if isinstance(existing, str):
        existing = existing.split()
    return list(existing)


def parse_fragment(html: str) -> list:
    """Parse an HTML snippet and return its top-level nodes, detached."""
    fragment = BeautifulSoup(html, "html.parser")
    return [node.extract() for node in list(fragment.contents)]


def new_soup() -> BeautifulSoup:
    return BeautifulSoup("", "html.parser")
