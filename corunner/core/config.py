"""
CoRunner — Configuration Management
=====================================
Validated process-level defaults with environment-based overrides.
All settings are loaded from environment variables with sensible defaults.

Usage:
    from corunner.core.config import get_settings
    settings = get_settings()
"""

from __future__ import annotations

from enum import StrEnum
from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Environment(StrEnum):
    """Deployment environment the runner is embedded in."""
    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"


class Settings(BaseSettings):
    """
    Root configuration object.

    All values can be overridden via environment variables prefixed with ``CORUNNER_``.
    Example: ``CORUNNER_DEFAULT_CONCURRENCY=8``
    """

    model_config = SettingsConfigDict(
        env_prefix="CORUNNER_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ── General ──────────────────────────────────────────────────────────
    app_name: str = "corunner"
    environment: Environment = Environment.DEVELOPMENT
    debug: bool = False

    # ── Scheduling ───────────────────────────────────────────────────────
    default_concurrency: int = Field(
        default=4,
        ge=1,
        description="Concurrency used when a runner is built without one.",
    )

    # ── Logging ──────────────────────────────────────────────────────────
    log_level: str = Field(
        default="INFO", pattern=r"^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$")
    log_format: str = "json"  # "json" or "console"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Return the singleton Settings instance.

    Cached so environment is read exactly once per process lifetime.
    Call ``get_settings.cache_clear()`` in tests to reset.
    """
    return Settings()
