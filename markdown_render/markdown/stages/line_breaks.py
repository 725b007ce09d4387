# markdown_render/markdown/stages/line_breaks.py
"""
Stage that turns single newlines inside running text into hard breaks.

Pandoc writes soft line breaks as plain newlines (``--wrap=preserve``). Authors
expect a newline in a paragraph to show up as a new line, so every newline in
phrasing text becomes ``<br />`` followed by the newline itself.

Left alone:
- preformatted content (pre, code, textarea, script, style) and math
- whitespace between block elements (``</p>\\n<p>``)
- the newline pandoc already emits after an explicit ``<br />``
"""

from bs4 import NavigableString, Tag
from bs4.element import PreformattedString

from ..tree import SyntaxTree
from .utils import BLOCK_TAGS, get_classes

_PRESERVE_TAGS = {"pre", "code", "kbd", "samp", "script", "style", "textarea", "math", "svg"}

_BREAK_HOSTS = {
    "p",
    "h1",
    "h2",
    "h3",
    "h4",
    "h5",
    "h6",
    "li",
    "dt",
    "dd",
    "td",
    "th",
    "caption",
    "figcaption",
    "summary",
}

_INLINE_TAGS = {
    "a",
    "abbr",
    "b",
    "cite",
    "del",
    "em",
    "i",
    "ins",
    "mark",
    "q",
    "s",
    "small",
    "span",
    "strike",
    "strong",
    "sub",
    "sup",
    "u",
}


def _in_running_text(text: NavigableString) -> bool:
    for parent in text.parents:
        if parent.name in _PRESERVE_TAGS or "math" in get_classes(parent):
            return False
        if parent.name in _BREAK_HOSTS:
            return True
        if parent.name in _INLINE_TAGS:
            continue
        return False
    return False


def _is_block(node) -> bool:
    return isinstance(node, Tag) and node.name in BLOCK_TAGS


def _is_break(node) -> bool:
    return isinstance(node, Tag) and node.name == "br"


def _replace_newlines(text: NavigableString, soup) -> None:
    value = str(text)
    head = tail = ""

    previous = text.previous_sibling
    if previous is None or _is_break(previous):
        stripped = value.lstrip("\n")
        head, value = value[: len(value) - len(stripped)], stripped
    if text.next_sibling is None:
        stripped = value.rstrip("\n")
        value, tail = stripped, value[len(stripped):]

    if "\n" not in value:
        return

    lines = value.split("\n")
    parts = [head + lines[0]]
    for line in lines[1:]:
        parts.append(soup.new_tag("br"))
        parts.append("\n" + line)
    parts[-1] = parts[-1] + tail

    replacement = [
        NavigableString(part) if isinstance(part, str) else part
        for part in parts
        if not (isinstance(part, str) and part == "")
    ]
    text.replace_with(*replacement)


def normalize_line_breaks(tree: SyntaxTree, context: dict) -> SyntaxTree:
    soup = tree.soup
    if soup is None:
        return tree

    for text in list(soup.find_all(string=True)):
        if isinstance(text, PreformattedString) or "\n" not in text:
            continue
        if not _in_running_text(text):
            continue

        if not text.strip():
            previous, following = text.previous_sibling, text.next_sibling
            if previous is None or following is None:
                continue
            if _is_block(previous) or _is_block(following) or _is_break(previous):
                continue

        _replace_newlines(text, soup)

    return tree
