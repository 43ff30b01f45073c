"""View-model passed to page templates."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class TemplateData(BaseModel):
    """Data handed from handlers to templates."""

    string_map: dict[str, str] = Field(default_factory=dict)
    data: dict[str, Any] = Field(default_factory=dict)
    flash: str = ""
    warning: str = ""
    error: str = ""
