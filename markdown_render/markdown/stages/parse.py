# markdown_render/markdown/stages/parse.py

import json
import logging

import pypandoc

from ..tree import SyntaxTree

logger = logging.getLogger(__name__)


def parse_markdown(tree: SyntaxTree, context: dict) -> SyntaxTree:
    """
    Parse the markdown source into pandoc's JSON AST.

    Block and inline grammar is pandoc's job; this stage only asks for the
    AST so later stages can work on structure rather than text. If pandoc
    fails the tree is left without a document and the raw HTML stage falls
    back to a plain paragraph of the source.
    """
    config = context["config"]

    try:
        output = pypandoc.convert_text(
            tree.source,
            to="json",
            format=config["reader_format"],
        )
        document = json.loads(output)
    except (RuntimeError, OSError, ValueError) as e:
        logger.error(f"Pandoc could not parse markdown source: {e}")
        return tree

    tree.document = document
    tree.api_version = document.get("pandoc-api-version")
    return tree
