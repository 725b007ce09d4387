# markdown_render/markdown/stages/__init__.py

import logging

from ..config import get_render_config
from ..tree import SyntaxTree
from .embeds import substitute_embeds
from .heading_slugs import assign_heading_slugs
from .highlight import highlight_code
from .line_breaks import normalize_line_breaks
from .math import detect_math, typeset_math
from .parse import parse_markdown
from .raw_html import lower_raw_html

logger = logging.getLogger(__name__)

STAGES = [
    parse_markdown,  # Block/inline grammar via pandoc -> JSON AST
    lower_raw_html,  # AST -> HTML node tree; author HTML becomes real nodes
    normalize_line_breaks,  # Single newlines become <br />
    highlight_code,  # Pygments highlighting for code blocks
    substitute_embeds,  # !youtube[...], !twitter[...], ... paragraphs
    assign_heading_slugs,  # Needs final heading text, so after embeds
    detect_math,  # Tag TeX nodes
    typeset_math,  # TeX -> MathML
    # Order matters - they run sequentially
]


def apply_stages(tree, context=None):
    """Apply all stages in order. A failing stage passes the tree through."""
    context = context or {}
    context.setdefault("config", get_render_config())

    for stage in STAGES:
        try:
            tree = stage(tree, context)
        except Exception:
            logger.exception(f"Stage {stage.__name__} failed; passing tree through unchanged")
    return tree


__all__ = ["STAGES", "SyntaxTree", "apply_stages"]
