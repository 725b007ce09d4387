"""
End-to-end tests for the markdown pipeline. These need a pandoc binary.
"""

import pytest
from bs4 import BeautifulSoup

from markdown_render.markdown import render_html, render_markdown

pytestmark = pytest.mark.usefixtures("pandoc")


def rendered(text):
    return BeautifulSoup(render_markdown(text), "html.parser")


class TestHeadings:
    def test_heading_gets_slug(self):
        soup = rendered("# Hello World")
        assert soup.h1["id"] == "hello-world"
        assert soup.h1.get_text() == "Hello World"

    def test_duplicate_headings(self):
        soup = rendered("## Intro\n\ntext\n\n## Intro\n\n### Intro")
        assert [h["id"] for h in soup.find_all(["h2", "h3"])] == ["intro", "intro-2", "intro-3"]

    def test_raw_html_heading_keeps_its_id(self):
        soup = rendered('<h2 id="custom">Custom</h2>\n\n## Custom')
        assert [h["id"] for h in soup.find_all("h2")] == ["custom", "custom-2"]

    def test_stable_across_runs(self):
        text = "# A\n\n# A\n\n## B"
        assert render_markdown(text) == render_markdown(text)


class TestBlocks:
    def test_soft_break_becomes_line_break(self):
        soup = rendered("line one\nline two")
        assert soup.p.find("br") is not None
        assert soup.p.get_text() == "line one\nline two"

    def test_paragraphs_not_joined_by_breaks(self):
        soup = rendered("one\n\ntwo")
        assert [p.get_text() for p in soup.find_all("p")] == ["one", "two"]
        assert soup.find("br") is None

    def test_code_block_highlighted(self):
        soup = rendered("```python\ndef f():\n    return 1\n```")
        assert soup.pre["class"] == ["language-python"]
        assert soup.code.find("span", class_="k") is not None

    def test_raw_html_passes_through(self):
        soup = rendered('<div class="note">\n\nhi\n\n</div>')
        note = soup.find("div", class_="note")
        assert note is not None
        assert "hi" in note.get_text()

    def test_table(self):
        soup = rendered("| a | b |\n|---|--:|\n| 1 | 2 |")
        assert soup.table is not None
        assert [td.get_text() for td in soup.find_all("td")] == ["1", "2"]

    def test_empty_input(self):
        assert render_markdown("") == ""
        assert render_markdown(None) == ""


class TestEmbeds:
    def test_youtube(self):
        soup = rendered("!youtube[dQw4w9WgXcQ]")
        assert soup.iframe["src"] == "https://www.youtube.com/embed/dQw4w9WgXcQ"

    def test_twitter(self):
        soup = rendered("!twitter[https://twitter.com/user/status/123]")
        link = soup.find("blockquote", class_="twitter-tweet").a
        assert link["href"] == "https://twitter.com/user/status/123"


class TestMath:
    def test_inline_math_typeset(self):
        soup = rendered("Area is $x^2$ here")
        span = soup.find("span", class_="math-inline")
        assert span.math is not None
        assert span.math.find("msup") is not None

    def test_display_math_typeset(self):
        soup = rendered("$$\\frac{a}{b}$$")
        span = soup.find("span", class_="math-display")
        assert span.math["display"] == "block"

    def test_math_fence(self):
        soup = rendered("```math\nE = mc^2\n```")
        block = soup.find("div", class_="math-display")
        assert block is not None
        assert block.math is not None


class TestSanitization:
    def test_script_removed(self):
        output = render_markdown("hello\n\n<script>alert(1)</script>")
        assert "<script" not in output
        assert "hello" in output

    def test_unsanitized_html_keeps_script(self):
        assert "<script>" in render_html("<script>alert(1)</script>")

    def test_javascript_link_neutralized(self):
        soup = rendered("[click](javascript:alert(1))")
        assert soup.a is not None
        assert soup.a.get("href") is None

    def test_foreign_iframe_removed(self):
        soup = rendered('<iframe src="https://evil.example.com/"></iframe>\n\ntext')
        assert soup.iframe is None
        assert "text" in soup.get_text()

    @pytest.mark.parametrize(
        "src",
        ["https://evil.example\\@www.youtube.com/embed/x", "https://evil.example@www.youtube.com/embed/x"],
    )
    def test_iframe_host_hidden_behind_userinfo_removed(self, src):
        output = render_markdown(f'<iframe src="{src}"></iframe>\n\ntext')
        assert "evil.example" not in output
        assert "<iframe" not in output
