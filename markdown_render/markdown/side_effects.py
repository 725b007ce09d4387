# markdown_render/markdown/side_effects.py
"""
Detects features in a render that need external resources and asks the
loader collaborators for them.

- Math: a cheap regex over the markdown source, checked before the pipeline
  runs so the stylesheet can load while rendering is still in progress.
- Tweet embeds: the ``twitter-tweet`` marker class in the rendered HTML means
  the widget script has to be loaded to upgrade the blockquote.

Each URL is requested at most once per dispatcher. Loader failures are not
the pipeline's concern and are only logged.
"""

import logging
import re
from typing import Callable, Optional, Set

from .config import get_render_config

logger = logging.getLogger(__name__)

MATH_PATTERN = re.compile(r"\$(.*)\$")
TWEET_MARKER = 'class="twitter-tweet"'

Loader = Callable[[str], None]


def uses_math(source: str) -> bool:
    """Lightweight check for inline/display math delimiters in markdown."""
    return bool(MATH_PATTERN.search(source or ""))


def uses_tweet_embed(html: str) -> bool:
    return TWEET_MARKER in (html or "")


class SideEffectDispatcher:
    def __init__(
        self,
        stylesheet_loader: Optional[Loader] = None,
        script_loader: Optional[Loader] = None,
        config: Optional[dict] = None,
    ):
        config = config or get_render_config()
        self._stylesheet_loader = stylesheet_loader
        self._script_loader = script_loader
        self._math_stylesheet_url = config["math_stylesheet_url"]
        self._embed_script_url = config["embed_script_url"]
        self._requested: Set[str] = set()

    @property
    def requested(self) -> Set[str]:
        return set(self._requested)

    def _request(self, loader: Optional[Loader], url: str) -> None:
        if loader is None or url in self._requested:
            return
        self._requested.add(url)
        try:
            loader(url)
        except Exception as e:
            logger.debug(f"Loading {url} failed, ignoring: {e}")

    def inspect_source(self, source: str) -> None:
        if uses_math(source):
            self._request(self._stylesheet_loader, self._math_stylesheet_url)

    def inspect_html(self, html: str) -> None:
        if uses_tweet_embed(html):
            self._request(self._script_loader, self._embed_script_url)
