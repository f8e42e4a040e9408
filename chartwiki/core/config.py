#!/usr/bin/env python
#
#
# -----------------------------------------------------------------------------
"""
Application configuration.

All values can be overridden via environment variables or a .env file.
"""
# -----------------------------------------------------------------------------

from __future__ import annotations

from functools import lru_cache
from importlib.metadata import PackageNotFoundError, version

from pydantic_settings import BaseSettings, SettingsConfigDict


# -----------------------------------------------------------------------------

def _package_version() -> str:
    try:
        return version("chartwiki")
    except PackageNotFoundError:
        # source checkout without `pip install -e .`
        return "0.0.0+local"


# -----------------------------------------------------------------------------

class Settings(BaseSettings):

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ── Application ────────────────────────────────────────────────────────

    app_name: str = "ChartWiki"
    app_version: str = _package_version()
    debug: bool = False

    # ── Remote community API ───────────────────────────────────────────────

    api_base: str = "http://localhost:8080/api"
    template_timeout: float = 10.0          # seconds, per template request

    # ── Asset hosts ────────────────────────────────────────────────────────

    cover_base: str = "//cni.mugzone.net"
    empty_cover: str = "//cni.mugzone.net/static/img/empty.jpg"
    avatar_base: str = "//cni.machart.top/avatar"

    # ── Wiki rendering ─────────────────────────────────────────────────────

    default_locale: str = "en"

    # ── CORS ───────────────────────────────────────────────────────────────

    cors_origins: list[str] = [
        "http://localhost:8000",
        "http://localhost:5173",
    ]


# -----------------------------------------------------------------------------

@lru_cache
def get_settings() -> Settings:
    return Settings()


# -----------------------------------------------------------------------------
