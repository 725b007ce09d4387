"""
Tests for the Django template tags.
"""

import pytest
from bs4 import BeautifulSoup
from django.template import Context, Template

from markdown_render.markdown import ResourceRegistry

pytestmark = pytest.mark.usefixtures("pandoc")


def render_template(source, **context):
    return Template("{% load markdown_tags %}" + source).render(Context(context))


class TestMarkdownFilter:
    def test_renders_markdown(self):
        output = render_template("{{ text|markdown }}", text="# Title\n\n**bold**")
        soup = BeautifulSoup(output, "html.parser")
        assert soup.h1["id"] == "title"
        assert soup.strong.get_text() == "bold"

    def test_output_is_sanitized_not_escaped(self):
        output = render_template("{{ text|markdown }}", text="<em>hi</em><script>x</script>")
        assert "<em>hi</em>" in output
        assert "script" not in output

    def test_missing_value(self):
        assert render_template("{{ text|markdown }}") == ""


class TestMarkdownWithContext:
    def test_container_and_theme(self):
        output = render_template('{% markdown_with_context text "github" %}', text="hello")
        container = BeautifulSoup(output, "html.parser").div
        assert container["class"] == ["markdown-render", "github"]
        assert container.p.get_text() == "hello"

    def test_default_theme(self):
        output = render_template("{% markdown_with_context text %}", text="hello")
        assert BeautifulSoup(output, "html.parser").div["class"] == ["markdown-render", "atom-one-light"]

    def test_resources_collected(self):
        registry = ResourceRegistry()
        output = render_template(
            "{% markdown_with_context text %}{% markdown_resources %}",
            text="$x^2$\n\n!twitter[https://twitter.com/u/status/1]",
            markdown_resources=registry,
        )
        assert registry.stylesheets == ["https://fred-wang.github.io/mathml.css/mathml.css"]
        assert registry.scripts == ["https://platform.twitter.com/widgets.js"]
        assert '<script async src="https://platform.twitter.com/widgets.js"' in output

    def test_resources_without_registry(self):
        assert render_template("{% markdown_resources %}") == ""
