"""
Tests for the live renderer: sequencing, throttling and fault recovery.

Most tests replace the pipeline with small fake render functions; the
pipeline-backed ones need pandoc.
"""

import asyncio
import time

import pytest
from django.test import override_settings

from markdown_render.markdown.boundary import BoundaryState
from markdown_render.markdown.nodes import ConversionError, Element, Text
from markdown_render.markdown.strategies import LiveRenderer, RenderMode, create_renderer


def paragraph(source):
    return f"<p>{source}</p>"


def slow_for(delays):
    """Render ``source`` as a paragraph after sleeping ``delays[source]`` seconds."""

    def render(source):
        time.sleep(delays.get(source, 0))
        return paragraph(source)

    return render


def broken(source):
    return f"<div>{source}" if source.startswith("bad") else paragraph(source)


class TestSequencing:
    @pytest.mark.asyncio
    async def test_latest_update_wins_over_slower_earlier_one(self):
        finished = []
        renderer = LiveRenderer(
            render=slow_for({"A": 0.3, "B": 0.01}),
            on_convert_finish=finished.append,
            interval=0,
        )

        renderer.update("A")
        renderer.update("B")
        await renderer.drain()

        assert renderer.sequence == 2
        assert renderer.nodes == [Element("p", {}, [Text("B")])]
        assert renderer.html == "<p>B</p>"
        assert finished == ["<p>B</p>"]

    @pytest.mark.asyncio
    async def test_stale_failure_is_ignored(self):
        def render(source):
            if source == "A":
                time.sleep(0.1)
                raise RuntimeError("pipeline crashed")
            return paragraph(source)

        errors = []
        renderer = LiveRenderer(render=render, on_error=errors.append, interval=0)
        renderer.update("A")
        renderer.update("B")
        await renderer.drain()

        assert errors == []
        assert renderer.state is BoundaryState.HEALTHY
        assert renderer.render().endswith("<p>B</p></div>")

    @pytest.mark.asyncio
    async def test_burst_of_updates_shows_the_last_one(self):
        renderer = LiveRenderer(render=paragraph, interval=0.05)
        for word in ("a", "ab", "abc", "abcd"):
            renderer.update(word)
            await asyncio.sleep(0)
        await renderer.drain()

        assert renderer.nodes == [Element("p", {}, [Text("abcd")])]
        renderer.close()

    @pytest.mark.asyncio
    async def test_throttled_updates_arrive_without_drain(self):
        renderer = LiveRenderer(render=paragraph, interval=0.05)
        renderer.update("first")
        await asyncio.sleep(0.05)
        renderer.update("second")
        renderer.update("third")
        await asyncio.sleep(0.3)

        assert renderer.nodes == [Element("p", {}, [Text("third")])]


class TestFaults:
    @pytest.mark.asyncio
    async def test_fault_and_recovery(self):
        errors = []
        renderer = LiveRenderer(render=broken, on_error=errors.append, interval=0)

        renderer.update("good")
        await renderer.drain()
        assert renderer.state is BoundaryState.HEALTHY

        renderer.update("bad one")
        await renderer.drain()
        renderer.update("bad two")
        await renderer.drain()

        assert renderer.state is BoundaryState.FAULTED
        assert len(errors) == 1
        assert "Failed to parse HTML tags." in renderer.render()

        renderer.update("fixed")
        await renderer.drain()

        assert renderer.state is BoundaryState.HEALTHY
        assert renderer.render() == '<div class="markdown-render atom-one-light"><p>fixed</p></div>'

    @pytest.mark.asyncio
    async def test_fault_and_recovery_through_pipeline(self, pandoc):
        errors = []
        renderer = LiveRenderer(on_error=errors.append, interval=0)

        renderer.update("<a:b>x</a:b>")
        await renderer.drain()
        assert renderer.state is BoundaryState.FAULTED
        assert len(errors) == 1
        assert isinstance(errors[0], ConversionError)

        renderer.update("<a:b>still bad</a:b>")
        await renderer.drain()
        assert len(errors) == 1

        renderer.update("all **good** now")
        await renderer.drain()
        assert renderer.state is BoundaryState.HEALTHY
        assert "<strong>good</strong>" in renderer.render()

    @pytest.mark.asyncio
    async def test_unbalanced_author_html_is_repaired_not_faulted(self, pandoc):
        errors = []
        renderer = LiveRenderer(on_error=errors.append, interval=0)
        renderer.update("<div>unclosed")
        await renderer.drain()

        assert renderer.state is BoundaryState.HEALTHY
        assert errors == []

    @pytest.mark.asyncio
    async def test_pipeline_exception_faults_boundary(self):
        def explode(source):
            raise RuntimeError("pipeline crashed")

        errors = []
        renderer = LiveRenderer(render=explode, on_error=errors.append, interval=0)
        renderer.update("x")
        await renderer.drain()

        assert renderer.state is BoundaryState.FAULTED
        assert isinstance(errors[0], RuntimeError)

    @pytest.mark.asyncio
    async def test_fallback_message_from_config(self):
        with override_settings(MARKDOWN_RENDER={"fallback_message": "Preview unavailable"}):
            renderer = LiveRenderer(render=broken, interval=0)
        renderer.update("bad")
        await renderer.drain()
        assert "<div>Preview unavailable</div>" in renderer.render()


class TestSideEffects:
    @pytest.mark.asyncio
    async def test_resources_requested_once(self):
        stylesheets, scripts = [], []

        def tweet(source):
            return '<blockquote class="twitter-tweet"><a href="https://twitter.com/x/status/1"></a></blockquote>'

        renderer = LiveRenderer(
            render=tweet,
            stylesheet_loader=stylesheets.append,
            script_loader=scripts.append,
            interval=0,
        )
        for source in ("$x$", "$x^2$", "$$y$$"):
            renderer.update(source)
            await renderer.drain()

        assert stylesheets == ["https://fred-wang.github.io/mathml.css/mathml.css"]
        assert scripts == ["https://platform.twitter.com/widgets.js"]


class TestClose:
    @pytest.mark.asyncio
    async def test_run_finishing_after_close_is_dropped(self):
        finished = []
        renderer = LiveRenderer(
            render=slow_for({"late": 0.1}),
            on_convert_finish=finished.append,
            interval=0,
        )
        renderer.update("late")
        await asyncio.sleep(0)
        renderer.close()

        await asyncio.sleep(0.3)
        await renderer.drain()

        assert renderer.nodes is None
        assert renderer.html is None
        assert finished == []

    @pytest.mark.asyncio
    async def test_pending_value_dropped_on_close(self):
        renderer = LiveRenderer(render=paragraph, interval=10)
        renderer.update("first")
        await asyncio.sleep(0.05)
        renderer.update("second")
        await asyncio.sleep(0.05)
        renderer.close()

        await asyncio.sleep(0.05)
        assert renderer.nodes == [Element("p", {}, [Text("first")])]


class TestCreateRenderer:
    def test_live_mode_from_string(self):
        renderer = create_renderer("live", render=paragraph)
        assert isinstance(renderer, LiveRenderer)
        assert renderer.mode is RenderMode.LIVE

    def test_update_requires_running_loop(self):
        renderer = LiveRenderer(render=paragraph)
        with pytest.raises(RuntimeError):
            renderer.update("x")
