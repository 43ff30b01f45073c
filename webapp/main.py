"""FastAPI application entry point."""

from __future__ import annotations

import logging
import sys
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from webapp.config import Settings
from webapp.exceptions import InternalServerError, TemplateCacheError, TemplateRenderError
from webapp.handlers.repository import REQUIRED_PAGES, Repository
from webapp.handlers.routes import build_router
from webapp.render.templates import TemplateRenderer, create_template_cache, require_pages

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator, Awaitable, Callable

    from starlette.responses import Response

logger = logging.getLogger(__name__)


def _configure_logging(debug: bool) -> None:
    """Configure application logging."""
    level = logging.DEBUG if debug else logging.INFO
    fmt = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"
    logging.basicConfig(
        level=level,
        format=fmt,
        stream=sys.stdout,
        force=True,
    )
    # Quiet noisy libraries
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
    """Application lifespan: startup and shutdown."""
    settings: Settings = app.state.settings
    _configure_logging(settings.debug)
    renderer: TemplateRenderer = app.state.renderer
    logger.info(
        "Starting application (debug=%s, use_cache=%s, pages=%s)",
        settings.debug,
        settings.use_cache,
        ", ".join(sorted(renderer.template_cache)),
    )

    yield

    logger.info("Application stopped")


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    The template cache is built here, before any request can be served: a
    template that fails to parse aborts startup with ``TemplateCacheError``.
    """
    if settings is None:
        settings = Settings()

    try:
        template_cache = create_template_cache(settings.template_dir)
        require_pages(template_cache, REQUIRED_PAGES)
    except TemplateCacheError as exc:
        logger.critical("Cannot create template cache: %s", exc)
        raise

    renderer = TemplateRenderer(settings, template_cache)
    repo = Repository(renderer)

    app = FastAPI(
        title="Basic Web App",
        description="A server-rendered website",
        version="0.1.0",
        lifespan=lifespan,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )
    app.state.settings = settings
    app.state.renderer = renderer
    app.state.repo = repo

    @app.middleware("http")
    async def security_headers(
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        response = await call_next(request)
        if settings.security_headers_enabled:
            response.headers.setdefault("X-Content-Type-Options", "nosniff")
            response.headers.setdefault("X-Frame-Options", "DENY")
            response.headers.setdefault("Referrer-Policy", "strict-origin-when-cross-origin")
        return response

    app.include_router(build_router(repo))

    # Global exception handlers for render failures

    @app.exception_handler(TemplateRenderError)
    async def template_render_error_handler(
        request: Request, exc: TemplateRenderError
    ) -> JSONResponse:
        logger.error(
            "TemplateRenderError in %s %s: %s",
            request.method,
            request.url.path,
            exc,
            exc_info=exc,
        )
        return JSONResponse(
            status_code=500,
            content={"detail": "Template rendering failed"},
        )

    @app.exception_handler(TemplateCacheError)
    async def template_cache_error_handler(
        request: Request, exc: TemplateCacheError
    ) -> JSONResponse:
        logger.error(
            "TemplateCacheError in %s %s: %s",
            request.method,
            request.url.path,
            exc,
            exc_info=exc,
        )
        return JSONResponse(
            status_code=500,
            content={"detail": "Template cache unavailable"},
        )

    @app.exception_handler(InternalServerError)
    async def internal_server_error_handler(
        request: Request, exc: InternalServerError
    ) -> JSONResponse:
        logger.error(
            "InternalServerError in %s %s: %s",
            request.method,
            request.url.path,
            exc,
            exc_info=exc,
        )
        return JSONResponse(
            status_code=500,
            content={"detail": "Internal server error"},
        )

    return app


app = create_app()


def cli_entry() -> None:
    """CLI entry point for running the server."""
    import uvicorn

    settings: Settings = app.state.settings
    _configure_logging(settings.debug)
    logger.info("Starting application on port %d", settings.port)
    uvicorn.run(
        "webapp.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )
