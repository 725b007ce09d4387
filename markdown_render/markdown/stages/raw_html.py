# markdown_render/markdown/stages/raw_html.py

import json
import logging

import pypandoc
from bs4 import BeautifulSoup

from ..config import installed_no_highlight_flag
from ..tree import SyntaxTree
from .utils import new_soup

logger = logging.getLogger(__name__)


def _fallback_soup(source: str) -> BeautifulSoup:
    """Best-effort tree when pandoc is unusable: the source as one paragraph."""
    soup = new_soup()
    if source:
        paragraph = soup.new_tag("p")
        paragraph.string = source
        soup.append(paragraph)
    return soup


def lower_raw_html(tree: SyntaxTree, context: dict) -> SyntaxTree:
    """
    Lower the pandoc AST into an HTML node tree.

    Pandoc keeps author-written HTML as opaque raw blocks. Writing the AST
    out and parsing the result with BeautifulSoup turns those fragments into
    ordinary nodes, so highlighting, embeds and slugs see user-supplied HTML
    the same way they see markdown-generated HTML.
    """
    config = context["config"]

    if tree.document is None:
        tree.soup = _fallback_soup(tree.source)
        return tree

    try:
        html = pypandoc.convert_text(
            json.dumps(tree.document),
            to="html5",
            format="json",
            # Pygments does highlighting
            extra_args=[*config["writer_args"], installed_no_highlight_flag()],
        )
    except (RuntimeError, OSError) as e:
        logger.error(f"Pandoc could not write HTML for the parsed document: {e}")
        tree.soup = _fallback_soup(tree.source)
        return tree

    tree.soup = BeautifulSoup(html, "html.parser")
    return tree
