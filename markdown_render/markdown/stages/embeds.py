# markdown_render/markdown/stages/embeds.py
"""
Stage that turns embed shorthand paragraphs into embedded media.

A paragraph consisting of nothing but one of these lines is replaced:

    !youtube[dQw4w9WgXcQ]
    !youtube[https://www.youtube.com/watch?v=dQw4w9WgXcQ]
    !twitter[https://twitter.com/user/status/123]
    !codesandbox[new-sandbox-id]
    !codepen[user/embed/abcdef]

YouTube, CodeSandbox and CodePen become iframes on hosts the sanitizer
allows. Tweets become the ``twitter-tweet`` blockquote that the widget
script upgrades client-side; the side-effect dispatcher loads that script
when it sees the marker class.
"""

import logging
import re
from typing import Callable, Dict, Optional
from urllib.parse import parse_qs, urlparse

from bs4 import BeautifulSoup, Tag

from ..tree import SyntaxTree

logger = logging.getLogger(__name__)

EMBED_PATTERN = re.compile(r"!(youtube|twitter|codesandbox|codepen)\[([^\s\[\]<>\"']+)\]")

_YOUTUBE_ALLOW = "accelerometer; autoplay; encrypted-media; gyroscope; picture-in-picture"


def _youtube_video_id(code: str) -> Optional[str]:
    """Accept a bare video id or a youtube.com / youtu.be URL."""
    if "/" not in code:
        return code

    parsed = urlparse(code)
    hostname = (parsed.hostname or "").lower()
    if hostname == "youtu.be":
        return parsed.path.strip("/") or None
    if hostname.endswith("youtube.com"):
        if parsed.path == "/watch":
            return (parse_qs(parsed.query).get("v") or [None])[0]
        if parsed.path.startswith("/embed/"):
            return parsed.path[len("/embed/"):] or None
    return None


def _youtube(soup: BeautifulSoup, code: str) -> Optional[Tag]:
    video_id = _youtube_video_id(code)
    if not video_id:
        return None
    iframe = soup.new_tag("iframe")
    iframe["src"] = f"https://www.youtube.com/embed/{video_id}"
    iframe["allow"] = _YOUTUBE_ALLOW
    iframe["allowfullscreen"] = ""
    return iframe


def _twitter(soup: BeautifulSoup, code: str) -> Optional[Tag]:
    if not code.startswith(("https://", "http://")):
        return None
    wrapper = soup.new_tag("div")
    wrapper["class"] = ["twitter-wrapper"]
    blockquote = soup.new_tag("blockquote")
    blockquote["class"] = ["twitter-tweet"]
    link = soup.new_tag("a")
    link["href"] = code
    blockquote.append(link)
    wrapper.append(blockquote)
    return wrapper


def _codesandbox(soup: BeautifulSoup, code: str) -> Optional[Tag]:
    iframe = soup.new_tag("iframe")
    iframe["src"] = f"https://codesandbox.io/embed/{code}"
    iframe["allow"] = "accelerometer; clipboard-write; encrypted-media"
    return iframe


def _codepen(soup: BeautifulSoup, code: str) -> Optional[Tag]:
    iframe = soup.new_tag("iframe")
    iframe["src"] = f"https://codepen.io/{code}"
    iframe["scrolling"] = "no"
    iframe["allowfullscreen"] = ""
    return iframe


EMBED_BUILDERS: Dict[str, Callable[[BeautifulSoup, str], Optional[Tag]]] = {
    "youtube": _youtube,
    "twitter": _twitter,
    "codesandbox": _codesandbox,
    "codepen": _codepen,
}


def substitute_embeds(tree: SyntaxTree, context: dict) -> SyntaxTree:
    soup = tree.soup
    if soup is None:
        return tree

    for paragraph in soup.find_all("p"):
        match = EMBED_PATTERN.fullmatch(paragraph.get_text().strip())
        if not match:
            continue

        kind, code = match.groups()
        try:
            embed = EMBED_BUILDERS[kind](soup, code)
        except Exception as e:
            logger.warning(f"Could not build {kind} embed for '{code}': {e}")
            continue

        if embed is None:
            logger.debug(f"Unrecognised {kind} embed target '{code}', keeping paragraph")
            continue

        paragraph.replace_with(embed)

    return tree
