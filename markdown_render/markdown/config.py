import logging
import re
from functools import lru_cache

import pypandoc
from django.conf import settings

logger = logging.getLogger(__name__)

_DEFAULTS = {
    # Pandoc reader: raw HTML and $-math stay on, while pandoc's own heading
    # ids, figures and footnotes are switched off so the stage chain owns ids
    # and the output stays inside the sanitization policy.
    "reader_format": (
        "markdown+raw_html+tex_math_dollars+pipe_tables+strikeout"
        "+autolink_bare_uris+task_lists+fenced_code_attributes+smart"
        "-auto_identifiers-implicit_figures-footnotes"
    ),
    "writer_args": [
        "--wrap=preserve",  # soft breaks survive as newlines for the line-break stage
        "--mathjax",  # keep TeX source in span.math for detection
    ],
    "math_args": ["--mathml"],
    "code_themes": (
        "atom-one-dark",
        "atom-one-light",
        "github",
        "monokai",
        "dracula",
    ),
    "default_code_theme": "atom-one-light",
    "throttle_interval": 0.25,
    "math_stylesheet_url": "https://fred-wang.github.io/mathml.css/mathml.css",
    "embed_script_url": "https://platform.twitter.com/widgets.js",
    "fallback_message": "Failed to parse HTML tags.",
}


def _settings_overrides():
    if not settings.configured:
        return {}
    overrides = getattr(settings, "MARKDOWN_RENDER", None) or {}
    if not isinstance(overrides, dict):
        logger.warning("MARKDOWN_RENDER setting is not a dict - ignoring it")
        return {}
    return overrides


def get_render_config():
    """
    Configuration for the markdown render pipeline.

    Pandoc parses the markdown and lowers it to HTML; everything after that
    (highlighting, embeds, slugs, math) runs as stages over the HTML tree.
    Projects can override any key through a ``MARKDOWN_RENDER`` dict in the
    Django settings.
    """
    config = dict(_DEFAULTS)
    config.update(_settings_overrides())
    return config


# pandoc 3.8 replaced --no-highlight with --syntax-highlighting=none
_SYNTAX_HIGHLIGHTING_SINCE = (3, 8)


def no_highlight_flag(version):
    """Flag that turns pandoc's own highlighting off for ``version``."""
    parts = tuple(int(part) for part in re.findall(r"\d+", version or "")[:2])
    if parts and parts >= _SYNTAX_HIGHLIGHTING_SINCE:
        return "--syntax-highlighting=none"
    return "--no-highlight"


@lru_cache(maxsize=1)
def installed_no_highlight_flag():
    """``no_highlight_flag`` for the pandoc binary pypandoc will run."""
    try:
        version = pypandoc.get_pandoc_version()
    except OSError as e:
        logger.warning(f"Could not determine pandoc version: {e}")
        version = None
    return no_highlight_flag(version)
