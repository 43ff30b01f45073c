"""Application-level exception types.

Convention:
- ``InternalServerError``: for errors whose details must never reach clients
  (unknown template names, template execution failures, etc.).
  The global handler logs the full message at ERROR and returns a generic
  500 to the client.
- ``TemplateCacheError``: raised while compiling templates. Fatal when it
  happens at startup; a 500 when the cache is rebuilt per request.
"""

from __future__ import annotations


class InternalServerError(Exception):
    """Raised for internal errors whose details must not be exposed to clients.

    The global exception handler in ``webapp/main.py`` catches this, logs
    the full message server-side, and returns HTTP 500 with a generic
    ``"Internal server error"`` detail.
    """


class TemplateNotFoundError(InternalServerError):
    """Raised when a page is looked up that the template cache does not hold."""


class TemplateRenderError(InternalServerError):
    """Raised when executing a compiled template fails."""


class TemplateCacheError(RuntimeError):
    """Raised when the template cache cannot be built (bad syntax, missing layout)."""
