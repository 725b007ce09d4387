# markdown_render/markdown/stages/highlight.py
"""
Stage that syntax-highlights code blocks with Pygments.

Pandoc (with its own highlighting switched off) writes a fenced block as
``<pre class="python"><code>…</code></pre>``; hand-written HTML usually looks
like ``<pre><code class="language-python">…</code></pre>``. Both are handled.
The highlighted block is normalised to::

    <pre class="language-python"><code class="language-python">
      <span class="k">def</span> …
    </code></pre>

Token colours come from the code theme class on the output container, so only
Pygments' short token classes are emitted here.
"""

import logging
from typing import Optional

from bs4 import Tag
from pygments import highlight
from pygments.formatters import HtmlFormatter
from pygments.lexers import get_lexer_by_name
from pygments.util import ClassNotFound

from ..tree import SyntaxTree
from .utils import get_classes, parse_fragment

logger = logging.getLogger(__name__)

_IGNORED_CLASSES = {"sourceCode", "numberLines", "highlight"}

# Languages owned by later stages
_SKIP_LANGUAGES = {"math"}

_FORMATTER = HtmlFormatter(nowrap=True)


def _code_language(pre: Tag, code: Tag) -> Optional[str]:
    for cls in get_classes(code):
        if cls.startswith("language-"):
            return cls[len("language-"):]
    for cls in get_classes(pre) + get_classes(code):
        if cls.startswith("language-"):
            return cls[len("language-"):]
        if cls not in _IGNORED_CLASSES:
            return cls
    return None


def highlight_code(tree: SyntaxTree, context: dict) -> SyntaxTree:
    soup = tree.soup
    if soup is None:
        return tree

    for pre in soup.find_all("pre"):
        code = pre.find("code", recursive=False)
        if code is None:
            continue

        language = _code_language(pre, code)
        if not language or language.lower() in _SKIP_LANGUAGES:
            continue

        try:
            lexer = get_lexer_by_name(language)
        except ClassNotFound:
            logger.debug(f"No Pygments lexer for '{language}', leaving block as is")
            continue

        try:
            highlighted = highlight(code.get_text(), lexer, _FORMATTER)
        except Exception as e:
            logger.warning(f"Highlighting '{language}' block failed: {e}")
            continue

        code.clear()
        for node in parse_fragment(highlighted):
            code.append(node)

        language_class = f"language-{language}"
        code["class"] = [language_class]
        pre["class"] = [language_class]

    return tree
