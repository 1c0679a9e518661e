"""Environment-based configuration using pydantic-settings.

Example:
    >>> from monok.settings import get_settings
    >>> settings = get_settings()
    >>> settings.rewrite.enabled
    True

    # Or with environment variables:
    # MONOK_LOG_LEVEL=DEBUG
    # MONOK_REWRITE_DUMP_SOURCE=true
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class LoggingSettings(BaseSettings):
    """Logging configuration for the ``monok`` logger."""

    model_config = SettingsConfigDict(
        env_prefix="MONOK_LOG_",
        extra="ignore",
    )

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "WARNING"
    format: Literal["json", "text"] = "text"

    @field_validator("level", mode="before")
    @classmethod
    def _normalize_level(cls, v: str) -> str:
        return v.upper() if isinstance(v, str) else v


class RewriteSettings(BaseSettings):
    """Call-site rewriting used by the ``@pipeline`` decorator."""

    model_config = SettingsConfigDict(
        env_prefix="MONOK_REWRITE_",
        extra="ignore",
    )

    enabled: bool = Field(default=True, description="Rewrite decorated functions; when off they are returned untouched")
    dump_source: bool = Field(default=False, description="Log the rewritten source of each function at DEBUG")


class MonokSettings(BaseSettings):
    """Root settings, loaded from MONOK_* environment variables and .env."""

    model_config = SettingsConfigDict(
        env_prefix="MONOK_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
        validate_default=True,
    )

    debug: bool = Field(default=False, description="Enable debug mode")

    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    rewrite: RewriteSettings = Field(default_factory=RewriteSettings)


@lru_cache(maxsize=1)
def get_settings() -> MonokSettings:
    """Get the global settings instance (cached)."""
    return MonokSettings()


def clear_settings_cache() -> None:
    """Clear the settings cache so the next get_settings() re-reads the environment."""
    get_settings.cache_clear()
