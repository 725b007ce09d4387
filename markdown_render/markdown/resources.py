# markdown_render/markdown/resources.py

from typing import List

from .serializer import escape_attribute


class ResourceRegistry:
    """
    Collects the stylesheets and scripts a page needs, each URL once.

    Implements both loader interfaces expected by ``SideEffectDispatcher``
    (``load_stylesheet`` and ``load_script``); ``render()`` produces the tags
    for the page head.
    """

    def __init__(self):
        self.stylesheets: List[str] = []
        self.scripts: List[str] = []

    def load_stylesheet(self, url: str) -> None:
        if url not in self.stylesheets:
            self.stylesheets.append(url)

    def load_script(self, url: str) -> None:
        if url not in self.scripts:
            self.scripts.append(url)

    def render(self) -> str:
        tags = [
            f'<link rel="stylesheet" href="{escape_attribute(url)}" crossorigin="anonymous">'
            for url in self.stylesheets
        ]
        tags.extend(
            f'<script async src="{escape_attribute(url)}" charset="utf-8"></script>'
            for url in self.scripts
        )
        return "\n".join(tags)
