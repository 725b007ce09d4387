# markdown_render/markdown/strategies.py
"""
Render strategies.

``SyncRenderer`` runs the whole pipeline once per source change and keeps the
sanitized string. It is what pages and templates use, and it is the only
strategy whose output may be shown to anyone other than the author.

``LiveRenderer`` is for the author's own preview while editing. Each source
change runs the pipeline in the event loop's executor; results are converted
to a node tree instead of being sanitized, and shown through a
``RenderBoundary``. Runs are numbered and only the latest one may update the
preview, while visible updates are throttled to one per interval.
"""

import asyncio
import enum
import logging
from typing import Callable, Optional, Set

from .boundary import BoundaryState, RenderBoundary
from .config import get_render_config
from .nodes import ConversionResult, convert_to_nodes
from .renderer import render_html
from .sanitizer import sanitize_html
from .serializer import escape_attribute
from .side_effects import Loader, SideEffectDispatcher
from .throttle import Throttle

logger = logging.getLogger(__name__)


class RenderMode(enum.Enum):
    SYNCHRONOUS = "synchronous"
    LIVE = "live"


def resolve_code_theme(code_theme: Optional[str], config: dict) -> str:
    theme = code_theme or config["default_code_theme"]
    if theme not in config["code_themes"]:
        raise ValueError(
            f"Unknown code theme '{theme}'; expected one of {', '.join(config['code_themes'])}"
        )
    return theme


def render_container(body: str, code_theme: str) -> str:
    """Wrap rendered output in the container carrying the code theme class."""
    return f'<div class="markdown-render {escape_attribute(code_theme)}">{body}</div>'


class _Renderer:
    mode: RenderMode

    def __init__(
        self,
        *,
        code_theme: Optional[str] = None,
        on_convert_finish: Optional[Callable[[str], None]] = None,
        stylesheet_loader: Optional[Loader] = None,
        script_loader: Optional[Loader] = None,
        render: Optional[Callable[[str], str]] = None,
        config: Optional[dict] = None,
    ):
        self.config = config or get_render_config()
        self.code_theme = resolve_code_theme(code_theme, self.config)
        self.dispatcher = SideEffectDispatcher(stylesheet_loader, script_loader, self.config)
        self.source: Optional[str] = None
        self._on_convert_finish = on_convert_finish
        self._render = render or self._render_pipeline

    def _render_pipeline(self, source: str) -> str:
        return render_html(source, {"config": self.config})

    def _finish(self, html: str) -> None:
        if self._on_convert_finish is not None:
            try:
                self._on_convert_finish(html)
            except Exception:
                logger.exception("on_convert_finish callback failed")
        self.dispatcher.inspect_html(html)


class SyncRenderer(_Renderer):
    mode = RenderMode.SYNCHRONOUS

    def __init__(self, source: Optional[str] = None, *, sanitize=sanitize_html, **options):
        super().__init__(**options)
        self._sanitize = sanitize
        self.html = ""
        if source is not None:
            self.update(source)

    def update(self, source: str) -> str:
        """Recompute the sanitized HTML for a new source, from scratch."""
        self.source = source
        self.dispatcher.inspect_source(source)

        html = self._render(source)
        self._finish(html)

        self.html = self._sanitize(html)
        return self.html

    def render(self) -> str:
        return render_container(self.html, self.code_theme)


class LiveRenderer(_Renderer):
    mode = RenderMode.LIVE

    def __init__(
        self,
        *,
        on_error: Optional[Callable[[Exception], None]] = None,
        interval: Optional[float] = None,
        **options,
    ):
        super().__init__(**options)
        if interval is None:
            interval = self.config["throttle_interval"]
        self.boundary = RenderBoundary(on_error, self.config["fallback_message"])
        self.html: Optional[str] = None
        self._throttle = Throttle(interval, self._apply)
        self._sequence = 0
        self._tasks: Set[asyncio.Task] = set()
        self._closed = False

    @property
    def state(self) -> BoundaryState:
        return self.boundary.state

    @property
    def nodes(self):
        return self.boundary.nodes

    @property
    def sequence(self) -> int:
        return self._sequence

    def update(self, source: str) -> asyncio.Task:
        """Schedule a pipeline run for ``source``; must be called inside a running loop."""
        loop = asyncio.get_running_loop()

        self._sequence += 1
        self.source = source
        self.dispatcher.inspect_source(source)

        task = loop.create_task(self._run(self._sequence, source))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _run(self, sequence: int, source: str) -> None:
        loop = asyncio.get_running_loop()

        try:
            html = await loop.run_in_executor(None, self._render, source)
        except Exception as e:
            logger.exception(f"Live render #{sequence} failed")
            if sequence == self._sequence and not self._closed:
                self._throttle.submit(ConversionResult.failure(e))
            return

        if self._closed:
            logger.debug(f"Discarding live render #{sequence} finished after close()")
            return
        if sequence != self._sequence:
            logger.debug(f"Discarding stale live render #{sequence} (latest is #{self._sequence})")
            return

        self.html = html
        self._finish(html)
        self._throttle.submit(convert_to_nodes(html))

    def _apply(self, result: ConversionResult) -> None:
        if result.ok:
            self.boundary.reset()
            self.boundary.present(result.nodes)
        else:
            self.boundary.fault(result.error)

    async def drain(self) -> None:
        """Wait for in-flight runs and show the latest result without waiting out the window."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)
        self._throttle.flush()

    def close(self) -> None:
        """Stop showing results: pending and in-flight runs are dropped."""
        self._closed = True
        for task in list(self._tasks):
            task.cancel()
        self._throttle.cancel()

    def render(self) -> str:
        return render_container(self.boundary.render(), self.code_theme)


def create_renderer(mode, **options):
    """Build the renderer for ``mode``; the mode is fixed for the instance's lifetime."""
    mode = RenderMode(mode)
    if mode is RenderMode.SYNCHRONOUS:
        return SyncRenderer(**options)
    return LiveRenderer(**options)
