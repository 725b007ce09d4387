from django.apps import AppConfig


class MarkdownRenderConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'markdown_render'
