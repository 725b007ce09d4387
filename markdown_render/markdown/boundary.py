# markdown_render/markdown/boundary.py

import enum
import logging
from typing import Callable, List, Optional

from .nodes import Node, render_nodes
from .serializer import escape_text

logger = logging.getLogger(__name__)


class BoundaryState(enum.Enum):
    HEALTHY = "healthy"
    FAULTED = "faulted"


class RenderBoundary:
    """
    Supervises the node tree shown in live mode.

    A failed conversion or a failure while mounting the tree moves the
    boundary to FAULTED: the tree is discarded, ``on_error`` is called once
    for the transition and the fallback message is shown instead. The
    boundary never retries by itself; it only becomes HEALTHY again when the
    owner calls ``reset()`` after producing a clean result.
    """

    def __init__(
        self,
        on_error: Optional[Callable[[Exception], None]] = None,
        fallback_message: str = "Failed to parse HTML tags.",
    ):
        self.state = BoundaryState.HEALTHY
        self.error: Optional[Exception] = None
        self._nodes: Optional[List[Node]] = None
        self._on_error = on_error
        self._fallback_message = fallback_message

    @property
    def nodes(self) -> Optional[List[Node]]:
        return self._nodes

    @property
    def fallback_html(self) -> str:
        return f"<div>{escape_text(self._fallback_message)}</div>"

    def present(self, nodes: List[Node]) -> None:
        if self.state is BoundaryState.FAULTED:
            logger.debug("Ignoring node tree while faulted; reset() first")
            return
        self._nodes = nodes

    def fault(self, error: Exception) -> None:
        if self.state is BoundaryState.FAULTED:
            return

        logger.warning(f"Live render faulted: {error}")
        self.state = BoundaryState.FAULTED
        self.error = error
        self._nodes = None

        if self._on_error is not None:
            try:
                self._on_error(error)
            except Exception:
                logger.exception("Render boundary error callback failed")

    def reset(self) -> None:
        if self.state is BoundaryState.HEALTHY:
            return
        logger.info("Live render recovered")
        self.state = BoundaryState.HEALTHY
        self.error = None

    def render(self, mount: Callable[[List[Node]], str] = render_nodes) -> str:
        if self.state is BoundaryState.FAULTED:
            return self.fallback_html
        if self._nodes is None:
            return ""

        try:
            return mount(self._nodes)
        except Exception as e:
            self.fault(e)
            return self.fallback_html
