# markdown_render/markdown/nodes.py
"""
Conversion of rendered HTML into a constrained tree of renderable nodes.

Live mode never injects the rendered HTML string. Instead the markup is
parsed into ``Element``/``Text`` nodes which are mounted by the render
boundary. Unlike the forgiving parser used by the stages, this conversion is
strict and reports markup it cannot represent:

- tag names that are not valid element names (``<a:b>`` from author HTML)
- end tags that do not close the innermost open element
- elements left open at the end of the input

The pipeline serializer always balances tags, so only the first of these is
reachable from rendered markdown; the others guard direct callers.

Mounting (``render_nodes``) additionally refuses void elements with children.
``<script>`` elements and ``on*`` event handler attributes are not
representable and are left out of the tree.

Conversion never raises: it returns a ``ConversionResult`` carrying either
the nodes or the error, and the caller updates the boundary from it.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from html.parser import HTMLParser
from typing import Dict, List, Optional, Union

from .serializer import VOID_TAGS, escape_text, start_tag

_VALID_TAG_NAME = re.compile(r"^[a-z][a-z0-9]*(-[a-z0-9]+)*$")

_DROPPED_TAGS = {"script"}


class ConversionError(ValueError):
    """Rendered HTML could not be converted into a node tree."""


@dataclass
class Text:
    value: str


@dataclass
class Element:
    tag: str
    attrs: Dict[str, str] = field(default_factory=dict)
    children: List["Node"] = field(default_factory=list)


Node = Union[Element, Text]


@dataclass(frozen=True)
class ConversionResult:
    nodes: Optional[List[Node]] = None
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, nodes: List[Node]) -> "ConversionResult":
        return cls(nodes=nodes)

    @classmethod
    def failure(cls, error: Exception) -> "ConversionResult":
        return cls(error=error)


class _NodeTreeBuilder(HTMLParser):
    def __init__(self):
        super().__init__(convert_charrefs=True)
        self.root: List[Node] = []
        self._open: List[Element] = []
        # depth inside a dropped element such as <script>
        self._skipping = 0

    def _children(self) -> List[Node]:
        return self._open[-1].children if self._open else self.root

    def _element(self, tag: str, attrs) -> Element:
        if not _VALID_TAG_NAME.match(tag):
            raise ConversionError(f"Invalid tag name <{tag}>")
        attributes = {
            name: value if value is not None else ""
            for name, value in attrs
            if not name.startswith("on")
        }
        return Element(tag=tag, attrs=attributes)

    def handle_starttag(self, tag, attrs):
        if self._skipping or tag in _DROPPED_TAGS:
            self._skipping += 1
            return
        element = self._element(tag, attrs)
        self._children().append(element)
        if tag not in VOID_TAGS:
            self._open.append(element)

    def handle_startendtag(self, tag, attrs):
        if self._skipping or tag in _DROPPED_TAGS:
            return
        element = self._element(tag, attrs)
        self._children().append(element)

    def handle_endtag(self, tag):
        if self._skipping:
            self._skipping -= 1
            return
        if tag in VOID_TAGS:
            # </br> and friends carry no structure
            return
        if not self._open:
            raise ConversionError(f"Unexpected </{tag}> with no open element")
        if self._open[-1].tag != tag:
            raise ConversionError(f"Unexpected </{tag}> while <{self._open[-1].tag}> is open")
        self._open.pop()

    def handle_data(self, data):
        if self._skipping or not data:
            return
        children = self._children()
        if children and isinstance(children[-1], Text):
            children[-1].value += data
        else:
            children.append(Text(data))

    def finish(self) -> List[Node]:
        self.close()
        if self._skipping:
            raise ConversionError("Unterminated <script> element")
        if self._open:
            names = ", ".join(f"<{element.tag}>" for element in self._open)
            raise ConversionError(f"Unclosed elements: {names}")
        return self.root


def convert_to_nodes(html: str) -> ConversionResult:
    """Parse rendered HTML into renderable nodes."""
    builder = _NodeTreeBuilder()
    try:
        builder.feed(html or "")
        nodes = builder.finish()
    except ConversionError as e:
        return ConversionResult.failure(e)
    except Exception as e:
        return ConversionResult.failure(ConversionError(str(e)))
    return ConversionResult.success(nodes)


def render_nodes(nodes: List[Node]) -> str:
    """Mount a node tree as markup. Raises ConversionError on malformed trees."""
    out = []
    stack = [(node, False) for node in reversed(nodes)]

    while stack:
        node, closing = stack.pop()
        if closing:
            out.append(f"</{node.tag}>")
        elif isinstance(node, Text):
            out.append(escape_text(node.value))
        elif isinstance(node, Element):
            if not _VALID_TAG_NAME.match(node.tag):
                raise ConversionError(f"Invalid tag name <{node.tag}>")
            if node.tag in VOID_TAGS:
                if node.children:
                    raise ConversionError(f"<{node.tag}> is a void element and cannot have children")
                out.append(start_tag(node.tag, node.attrs, void=True))
                continue
            out.append(start_tag(node.tag, node.attrs))
            stack.append((node, True))
            stack.extend((child, False) for child in reversed(node.children))
        else:
            raise ConversionError(f"Cannot render node of type {type(node).__name__}")

    return "".join(out)


def text_content(nodes: List[Node]) -> str:
    """Concatenated text of a node tree."""
    parts = []
    stack = list(reversed(nodes))
    while stack:
        node = stack.pop()
        if isinstance(node, Text):
            parts.append(node.value)
        else:
            stack.extend(reversed(node.children))
    return "".join(parts)
