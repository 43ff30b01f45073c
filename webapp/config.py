"""Application configuration loaded from environment variables."""

from __future__ import annotations

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_TEMPLATE_DIR = Path(__file__).resolve().parent / "templates"


class Settings(BaseSettings):
    """Web application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Core
    debug: bool = False
    site_name: str = "My Site"

    # Templates
    template_dir: Path = DEFAULT_TEMPLATE_DIR
    # When False, templates are re-parsed on every request (development live reload)
    use_cache: bool = True

    # Server
    host: str = "0.0.0.0"
    port: int = Field(default=8080, ge=1, le=65535)

    # Response hardening
    security_headers_enabled: bool = True
