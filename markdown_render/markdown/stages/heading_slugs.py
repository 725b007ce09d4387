# markdown_render/markdown/stages/heading_slugs.py

from typing import Dict

from django.utils.text import slugify

from ..tree import SyntaxTree
from .utils import HEADING_TAGS


def _slug_for(text: str) -> str:
    """Lowercase, hyphenated slug; non-ASCII letters are kept."""
    return slugify(text, allow_unicode=True) or "section"


def assign_heading_slugs(tree: SyntaxTree, context: dict) -> SyntaxTree:
    """
    Give every heading an id derived from its text for deep linking.

    Runs after embeds and raw HTML handling so the heading text is final.
    Duplicate headings get uniquified slugs by appending -2, -3, ...
    Headings that already carry an id (hand-written HTML) keep it, and the id
    is reserved so generated slugs never collide with it.
    """
    soup = tree.soup
    if soup is None:
        return tree

    headings = soup.find_all(list(HEADING_TAGS))
    used_slugs: Dict[str, int] = {}

    for heading in headings:
        existing = heading.get("id")
        if existing:
            used_slugs.setdefault(existing, 1)

    def unique_slug(base: str) -> str:
        count = used_slugs.get(base, 0)
        if count == 0:
            used_slugs[base] = 1
            return base
        # Already used; find the next free suffix
        while True:
            count += 1
            candidate = f"{base}-{count}"
            if candidate not in used_slugs:
                used_slugs[base] = count
                used_slugs[candidate] = 1
                return candidate

    for heading in headings:
        if heading.get("id"):
            continue
        heading["id"] = unique_slug(_slug_for(heading.get_text()))

    return tree
