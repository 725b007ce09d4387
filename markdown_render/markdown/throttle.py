# markdown_render/markdown/throttle.py

import asyncio
from typing import Any, Callable, Optional

_NOTHING = object()


class Throttle:
    """
    Apply at most one value per ``interval`` seconds.

    The first value submitted while idle is applied immediately and opens a
    window. Values submitted inside the window replace each other; when the
    window closes the most recent one is applied and a new window opens.
    Must be used from a running event loop.
    """

    def __init__(self, interval: float, callback: Callable[[Any], None]):
        self.interval = interval
        self._callback = callback
        self._handle: Optional[asyncio.TimerHandle] = None
        self._pending: Any = _NOTHING

    @property
    def pending(self) -> bool:
        return self._pending is not _NOTHING

    def submit(self, value: Any) -> None:
        if self._handle is not None:
            self._pending = value
            return

        self._callback(value)
        self._handle = asyncio.get_running_loop().call_later(self.interval, self._close_window)

    def _close_window(self) -> None:
        self._handle = None
        if self._pending is not _NOTHING:
            value, self._pending = self._pending, _NOTHING
            self.submit(value)

    def flush(self) -> None:
        """Close the current window now, applying any pending value."""
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None
        if self._pending is not _NOTHING:
            value, self._pending = self._pending, _NOTHING
            self._callback(value)

    def cancel(self) -> None:
        """Drop any pending value and close the window without applying."""
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None
        self._pending = _NOTHING
