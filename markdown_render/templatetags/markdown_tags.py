# markdown_render/templatetags/markdown_tags.py

from django import template
from django.utils.safestring import mark_safe

from markdown_render.markdown import RenderMode, create_renderer, render_markdown

register = template.Library()


@register.filter(name="markdown")
def markdown_filter(value):
    return mark_safe(render_markdown(value or ""))


@register.simple_tag(takes_context=True)
def markdown_with_context(context, value, code_theme=None):
    """
    Render markdown in the themed container.

    If the template context holds a ``ResourceRegistry`` under
    ``markdown_resources``, stylesheets and scripts the content needs are
    registered there so ``{% markdown_resources %}`` can emit them.
    """
    resources = context.get("markdown_resources")
    renderer = create_renderer(
        RenderMode.SYNCHRONOUS,
        code_theme=code_theme,
        stylesheet_loader=resources.load_stylesheet if resources is not None else None,
        script_loader=resources.load_script if resources is not None else None,
    )
    renderer.update(value or "")
    return mark_safe(renderer.render())


@register.simple_tag(takes_context=True)
def markdown_resources(context):
    resources = context.get("markdown_resources")
    if resources is None:
        return ""
    return mark_safe(resources.render())
