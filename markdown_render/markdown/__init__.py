# markdown_render/markdown/__init__.py

from .boundary import BoundaryState, RenderBoundary
from .nodes import ConversionError, ConversionResult, convert_to_nodes
from .renderer import render_html, render_markdown
from .resources import ResourceRegistry
from .sanitizer import DEFAULT_POLICY, SanitizationPolicy, sanitize, sanitize_html
from .side_effects import SideEffectDispatcher, uses_math
from .strategies import LiveRenderer, RenderMode, SyncRenderer, create_renderer

__all__ = [
    "BoundaryState",
    "ConversionError",
    "ConversionResult",
    "DEFAULT_POLICY",
    "LiveRenderer",
    "RenderBoundary",
    "RenderMode",
    "ResourceRegistry",
    "SanitizationPolicy",
    "SideEffectDispatcher",
    "SyncRenderer",
    "convert_to_nodes",
    "create_renderer",
    "render_html",
    "render_markdown",
    "sanitize",
    "sanitize_html",
    "uses_math",
]
