"""
Tests for the leading/trailing edge throttle.
"""

import asyncio

import pytest

from markdown_render.markdown.throttle import Throttle


class TestThrottle:
    @pytest.mark.asyncio
    async def test_first_value_applied_immediately(self):
        applied = []
        throttle = Throttle(10, applied.append)
        throttle.submit(1)
        assert applied == [1]
        throttle.cancel()

    @pytest.mark.asyncio
    async def test_values_inside_window_coalesce_to_latest(self):
        applied = []
        throttle = Throttle(0.05, applied.append)

        throttle.submit(1)
        throttle.submit(2)
        throttle.submit(3)
        assert applied == [1]
        assert throttle.pending

        await asyncio.sleep(0.15)
        assert applied == [1, 3]
        assert not throttle.pending

    @pytest.mark.asyncio
    async def test_flush_applies_pending_now(self):
        applied = []
        throttle = Throttle(10, applied.append)
        throttle.submit("a")
        throttle.submit("b")

        throttle.flush()
        assert applied == ["a", "b"]

        # window closed by flush, next value is applied immediately
        throttle.submit("c")
        assert applied == ["a", "b", "c"]
        throttle.cancel()

    @pytest.mark.asyncio
    async def test_cancel_drops_pending(self):
        applied = []
        throttle = Throttle(0.02, applied.append)
        throttle.submit(1)
        throttle.submit(2)
        throttle.cancel()

        await asyncio.sleep(0.05)
        assert applied == [1]
