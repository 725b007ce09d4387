# markdown_render/markdown/stages/math.py
"""
Math detection and typesetting stages.

Detection gathers every piece of TeX in the tree into one tagged form:

    <span class="math math-inline">x^2</span>
    <span class="math math-display">\\sum_i x_i</span>      (inside a paragraph)
    <div class="math math-display">E = mc^2</div>           (```math block)

Pandoc writes ``$…$`` / ``$$…$$`` as ``<span class="math inline">\\(…\\)</span>``
and ``<span class="math display">\\[…\\]</span>``; a fenced ``math`` block comes
out as ``<pre class="math"><code>…</code></pre>``.

Typesetting sends all tagged nodes to pandoc in one document and swaps each
node's TeX for the MathML pandoc returns. Anything pandoc cannot typeset keeps
its TeX source.
"""

import json
import logging
from typing import List

import pypandoc
from bs4 import BeautifulSoup, Tag

from ..tree import SyntaxTree
from .utils import get_classes

logger = logging.getLogger(__name__)

INLINE_CLASS = "math-inline"
DISPLAY_CLASS = "math-display"

_DELIMITERS = (("\\(", "\\)"), ("\\[", "\\]"), ("$$", "$$"), ("$", "$"))


def _strip_delimiters(tex: str) -> str:
    tex = tex.strip()
    for start, end in _DELIMITERS:
        if tex.startswith(start) and tex.endswith(end) and len(tex) >= len(start) + len(end):
            return tex[len(start): len(tex) - len(end)].strip()
    return tex


def _is_display(node: Tag) -> bool:
    return DISPLAY_CLASS in get_classes(node)


def detect_math(tree: SyntaxTree, context: dict) -> SyntaxTree:
    soup = tree.soup
    if soup is None:
        return tree

    for span in soup.find_all("span", class_="math"):
        classes = get_classes(span)
        if INLINE_CLASS in classes or DISPLAY_CLASS in classes:
            continue
        if "display" in classes:
            mode = DISPLAY_CLASS
        elif "inline" in classes:
            mode = INLINE_CLASS
        else:
            continue

        tex = _strip_delimiters(span.get_text())
        span.clear()
        span.string = tex
        span["class"] = ["math", mode]

    for pre in soup.find_all("pre"):
        code = pre.find("code", recursive=False)
        languages = get_classes(pre) + (get_classes(code) if code else [])
        if "math" not in languages and "language-math" not in languages:
            continue

        block = soup.new_tag("div")
        block["class"] = ["math", DISPLAY_CLASS]
        block.string = pre.get_text().strip()
        pre.replace_with(block)

    return tree


def _math_nodes(soup: BeautifulSoup) -> List[Tag]:
    return [
        node
        for node in soup.find_all(["span", "div"], class_="math")
        if INLINE_CLASS in get_classes(node) or _is_display(node)
    ]


def typeset_math(tree: SyntaxTree, context: dict) -> SyntaxTree:
    soup = tree.soup
    if soup is None or not tree.api_version:
        return tree

    nodes = _math_nodes(soup)
    if not nodes:
        return tree

    config = context["config"]

    # One paragraph per node keeps the pandoc output aligned with `nodes`.
    document = {
        "pandoc-api-version": tree.api_version,
        "meta": {},
        "blocks": [
            {
                "t": "Para",
                "c": [
                    {
                        "t": "Math",
                        "c": [
                            {"t": "DisplayMath" if _is_display(node) else "InlineMath"},
                            node.get_text(),
                        ],
                    }
                ],
            }
            for node in nodes
        ],
    }

    try:
        html = pypandoc.convert_text(
            json.dumps(document),
            to="html5",
            format="json",
            extra_args=config["math_args"],
        )
    except (RuntimeError, OSError) as e:
        logger.warning(f"Math typesetting failed, keeping TeX source: {e}")
        return tree

    paragraphs = BeautifulSoup(html, "html.parser").find_all("p", recursive=False)
    if len(paragraphs) != len(nodes):
        logger.warning(
            f"Math typesetting returned {len(paragraphs)} results for {len(nodes)} nodes; "
            "keeping TeX source"
        )
        return tree

    for node, paragraph in zip(nodes, paragraphs):
        mathml = paragraph.find("math")
        if mathml is None:
            logger.debug(f"Pandoc could not typeset '{node.get_text()}'")
            continue
        node.clear()
        node.append(mathml.extract())

    return tree
