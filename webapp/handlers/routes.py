"""Route table for the page handlers."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import APIRouter
from fastapi.responses import HTMLResponse

if TYPE_CHECKING:
    from webapp.handlers.repository import PageHandlers


def build_router(handlers: PageHandlers) -> APIRouter:
    """Bind ``handlers`` to the two page routes."""
    router = APIRouter(tags=["pages"])
    router.add_api_route(
        "/",
        handlers.home,
        methods=["GET"],
        response_class=HTMLResponse,
        include_in_schema=False,
    )
    router.add_api_route(
        "/about",
        handlers.about,
        methods=["GET"],
        response_class=HTMLResponse,
        include_in_schema=False,
    )
    return router
