"""Centralised configuration using pydantic-settings.

All environment variables are read through the Settings class.
Consumers call ``get_settings()`` to obtain a cached, validated instance.
Tests construct ``Settings(_env_file=None, ...)`` directly for isolation.
"""

from __future__ import annotations

import logging
import re
from functools import lru_cache
from pathlib import Path

from pydantic import BaseModel, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

# src/quilltip/config.py  ->  parent x3  ->  project root
_PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent

_HEX_COLOUR = re.compile(r"^#[0-9A-Fa-f]{6}$")


# ---------------------------------------------------------------------------
# Sub-models (one per configuration domain)
# ---------------------------------------------------------------------------
class HighlightConfig(BaseModel):
    """Highlight creation and reconciliation settings."""

    min_length: int = 3
    max_length: int = 5000
    default_color: str = "#FFEB3B"
    mark_type: str = "highlight"
    clamp_out_of_range: bool = False

    @field_validator("default_color")
    @classmethod
    def _check_colour(cls, value: str) -> str:
        if not _HEX_COLOUR.match(value):
            msg = f"HIGHLIGHT__DEFAULT_COLOR must be a #RRGGBB colour, got {value!r}"
            raise ValueError(msg)
        return value

    @field_validator("min_length")
    @classmethod
    def _check_min_length(cls, value: int) -> int:
        if value < 1:
            msg = "HIGHLIGHT__MIN_LENGTH must be at least 1"
            raise ValueError(msg)
        return value

    @model_validator(mode="after")
    def _check_length_bounds(self) -> HighlightConfig:
        if self.max_length < self.min_length:
            msg = "HIGHLIGHT__MAX_LENGTH must not be below HIGHLIGHT__MIN_LENGTH"
            raise ValueError(msg)
        return self


class TipConfig(BaseModel):
    """Tip aggregation settings."""

    platform_fee_bps: int = 250
    top_n: int = 10


class DatabaseConfig(BaseModel):
    """Database connection configuration."""

    url: str | None = None
    pool_size: int = 5
    max_overflow: int = 10


class AppConfig(BaseModel):
    """Application runtime configuration."""

    log_dir: Path = Path("logs")


class DevConfig(BaseModel):
    """Development and testing toggles."""

    database_echo: bool = False


# ---------------------------------------------------------------------------
# Root settings
# ---------------------------------------------------------------------------
class Settings(BaseSettings):
    """Settings with automatic .env loading and type validation.

    Environment variables use double-underscore delimiter for nesting:
    ``HIGHLIGHT__MIN_LENGTH``, ``DATABASE__URL``, ``TIP__PLATFORM_FEE_BPS``.
    """

    model_config = SettingsConfigDict(
        env_file=_PROJECT_ROOT / ".env",
        env_nested_delimiter="__",
        extra="ignore",
    )

    highlight: HighlightConfig = HighlightConfig()
    tip: TipConfig = TipConfig()
    database: DatabaseConfig = DatabaseConfig()
    app: AppConfig = AppConfig()
    dev: DevConfig = DevConfig()


# ---------------------------------------------------------------------------
# Singleton access
# ---------------------------------------------------------------------------
@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return a cached Settings instance.

    Call ``get_settings.cache_clear()`` in tests to reset.
    """
    settings = Settings()

    env_file = settings.model_config.get("env_file")
    if env_file is not None and Path(str(env_file)).is_file():
        logger.info("Settings loaded .env from: %s", env_file)
    else:
        logger.info("Settings: no .env file found, using env vars and defaults")

    return settings
