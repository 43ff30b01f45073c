"""Page handlers."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

from fastapi import Request
from fastapi.responses import HTMLResponse

from webapp.schemas.template_data import TemplateData

if TYPE_CHECKING:
    from webapp.render.templates import TemplateRenderer

HOME_PAGE = "home"
ABOUT_PAGE = "about"

# Pages the handlers render; startup refuses to serve without them.
REQUIRED_PAGES = (HOME_PAGE, ABOUT_PAGE)


class PageHandlers(Protocol):
    """Handlers that can be mounted by ``build_router``."""

    def home(self, request: Request) -> HTMLResponse: ...

    def about(self, request: Request) -> HTMLResponse: ...


class Repository:
    """Handler set that owns the renderer it draws pages with.

    Render failures are left to propagate; the global exception handlers
    map them to 500 responses.
    """

    def __init__(self, renderer: TemplateRenderer) -> None:
        self.renderer = renderer

    def home(self, request: Request) -> HTMLResponse:
        """Render the home page."""
        return HTMLResponse(self.renderer.render(HOME_PAGE, TemplateData()))

    def about(self, request: Request) -> HTMLResponse:
        """Render the about page."""
        template_data = TemplateData(string_map={"test": "Hello, again."})
        return HTMLResponse(self.renderer.render(ABOUT_PAGE, template_data))
