# markdown_render/markdown/serializer.py
"""
Deterministic HTML serialization for the stage chain's node tree.

Rules per node kind:
- Tag: start tag with attributes in source order, children, end tag; void
  elements get ``<br />`` form and never children
- NavigableString: escaped text (raw inside script/style)
- Comment: ``<!--…-->``
- anything else (doctype, CDATA, processing instructions, declarations,
  unknown node kinds): empty string

The walk is iterative so deeply nested author HTML cannot exhaust the
recursion limit. The output is untrusted HTML.
"""

from __future__ import annotations

from typing import Iterable, Optional

from bs4 import Comment, NavigableString, Tag
from bs4.element import PreformattedString

from .tree import SyntaxTree

VOID_TAGS = frozenset(
    {
        "area",
        "base",
        "br",
        "col",
        "embed",
        "hr",
        "img",
        "input",
        "link",
        "meta",
        "param",
        "source",
        "track",
        "wbr",
    }
)

RAW_TEXT_TAGS = frozenset({"script", "style"})


def escape_text(value: str) -> str:
    return value.replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;")


def escape_attribute(value: str) -> str:
    return escape_text(value).replace('"', "&quot;")


def attribute_value(value) -> str:
    """Flatten a bs4 attribute value (multi-valued attributes are lists)."""
    if value is None:
        return ""
    if isinstance(value, (list, tuple)):
        return " ".join(str(item) for item in value)
    return str(value)


def start_tag(name: str, attrs: dict, void: bool = False) -> str:
    parts = [name]
    for key, value in attrs.items():
        parts.append(f'{key}="{escape_attribute(attribute_value(value))}"')
    return f"<{' '.join(parts)} />" if void else f"<{' '.join(parts)}>"


def _serialize_string(node, parent_name: Optional[str]) -> str:
    if isinstance(node, Comment):
        return f"<!--{node}-->"
    if isinstance(node, PreformattedString):
        # Doctype, CData, Declaration, ProcessingInstruction
        return ""
    if isinstance(node, NavigableString):
        if parent_name in RAW_TEXT_TAGS:
            return str(node)
        return escape_text(str(node))
    return ""


def serialize_soup(nodes: Iterable) -> str:
    """Serialize a sequence of sibling bs4 nodes."""
    out = []
    stack = [(node, False) for node in reversed(list(nodes))]

    while stack:
        node, closing = stack.pop()
        if closing:
            out.append(f"</{node.name}>")
            continue

        if isinstance(node, Tag):
            if node.name in VOID_TAGS:
                out.append(start_tag(node.name, node.attrs, void=True))
                continue
            out.append(start_tag(node.name, node.attrs))
            stack.append((node, True))
            stack.extend((child, False) for child in reversed(node.contents))
        else:
            parent = getattr(node, "parent", None)
            out.append(_serialize_string(node, parent.name if parent is not None else None))

    return "".join(out)


def serialize(tree: SyntaxTree) -> str:
    """Convert the final tree of a pipeline run to an HTML string."""
    if tree.soup is None:
        return ""
    return serialize_soup(tree.soup.contents)
