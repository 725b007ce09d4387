"""
Shared test fixtures and configuration.
"""

import django
import pypandoc
import pytest
from bs4 import BeautifulSoup
from django.conf import settings


def pytest_configure(config):
    if not settings.configured:
        settings.configure(
            INSTALLED_APPS=["markdown_render"],
            TEMPLATES=[
                {
                    "BACKEND": "django.template.backends.django.DjangoTemplates",
                    "APP_DIRS": False,
                }
            ],
        )
        django.setup()


def _pandoc_available() -> bool:
    try:
        pypandoc.get_pandoc_version()
    except OSError:
        return False
    return True


@pytest.fixture(scope="session")
def pandoc():
    """Skip tests that need a pandoc binary when none is installed."""
    if not _pandoc_available():
        pytest.skip("pandoc binary not available")


@pytest.fixture
def soup_of():
    """Parse HTML the same way the pipeline does."""

    def parse(html: str) -> BeautifulSoup:
        return BeautifulSoup(html, "html.parser")

    return parse
