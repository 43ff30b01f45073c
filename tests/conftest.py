"""Shared test fixtures for the web application."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

import pytest
from httpx import ASGITransport, AsyncClient

from webapp.config import Settings
from webapp.main import create_app

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator
    from pathlib import Path

BASE_LAYOUT = (
    "<!doctype html><html><head><title>{% block title %}{% endblock %}</title></head>"
    "<body>{% block content %}{% endblock %}</body></html>\n"
)
HOME_PAGE = (
    '{% extends "base.layout.html" %}\n'
    "{% block title %}Home{% endblock %}\n"
    "{% block content %}<h1>Test home page</h1>{% endblock %}\n"
)
ABOUT_PAGE = (
    '{% extends "base.layout.html" %}\n'
    "{% block title %}About{% endblock %}\n"
    "{% block content %}<h1>Test about page</h1><p>{{ string_map.test }}</p>{% endblock %}\n"
)


@asynccontextmanager
async def create_test_client(settings: Settings) -> AsyncGenerator[AsyncClient]:
    """Create an HTTP test client for an app built from ``settings``.

    The template cache is built by ``create_app`` itself, so no lifespan
    work is needed before requests can be served.
    """
    app = create_app(settings)
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac


@pytest.fixture
def tmp_template_dir(tmp_path: Path) -> Path:
    """Create a temporary template directory with one layout and two pages."""
    templates = tmp_path / "templates"
    templates.mkdir()
    (templates / "base.layout.html").write_text(BASE_LAYOUT)
    (templates / "home.page.html").write_text(HOME_PAGE)
    (templates / "about.page.html").write_text(ABOUT_PAGE)
    return templates


@pytest.fixture
def test_settings(tmp_template_dir: Path) -> Settings:
    """Create test settings pointing at the temporary templates."""
    return Settings(
        _env_file=None,
        debug=True,
        template_dir=tmp_template_dir,
    )


@pytest.fixture
async def client(test_settings: Settings) -> AsyncGenerator[AsyncClient]:
    """Create test HTTP client."""
    async with create_test_client(test_settings) as ac:
        yield ac
