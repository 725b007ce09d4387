from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from bs4 import BeautifulSoup


@dataclass
class SyntaxTree:
    """
    Intermediate tree handed from stage to stage during one pipeline run.

    ``document`` holds the pandoc JSON AST produced by the parse stage. Once
    the raw HTML stage has lowered it, ``soup`` holds the HTML node tree that
    every later stage mutates in place. ``api_version`` is kept so stages can
    hand small documents back to pandoc.
    """

    source: str
    document: Optional[dict[str, Any]] = None
    soup: Optional[BeautifulSoup] = None
    api_version: Optional[list[int]] = None
