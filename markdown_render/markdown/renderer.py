# markdown_render/markdown/renderer.py

from .sanitizer import sanitize_html
from .serializer import serialize
from .stages import apply_stages
from .tree import SyntaxTree


def render_html(text, context=None):
    """
    Run the stage chain and serialize the result.

    The returned HTML is untrusted: it must go through ``sanitize_html`` (or
    live-mode node conversion) before it reaches a page.

    Args:
        text: Raw markdown text
        context: Optional dict for stages that need additional data
    """
    context = context or {}
    tree = apply_stages(SyntaxTree(source=text or ""), context)
    return serialize(tree)


def render_markdown(text, context=None):
    """
    Main rendering function: markdown in, sanitized HTML out.

    Also serves as the ahead-of-time snapshot for synchronous renderers.
    """
    return sanitize_html(render_html(text, context))
