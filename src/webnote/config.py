"""Centralised configuration using pydantic-settings.

All environment variables are read through the Settings class.
Consumers call ``get_settings()`` to obtain a cached, validated instance.
Tests construct ``Settings(_env_file=None, ...)`` directly for isolation.
"""

from __future__ import annotations

import logging
from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

# src/webnote/config.py  ->  parent x3  ->  project root
_PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent

DEFAULT_COLORS = ("yellow", "green", "blue", "pink", "purple")


# ---------------------------------------------------------------------------
# Sub-models (one per configuration domain)
# ---------------------------------------------------------------------------
class AnchorConfig(BaseModel):
    """Span capture and marker settings."""

    context_length: int = Field(default=30, ge=0)
    colors: tuple[str, ...] = DEFAULT_COLORS
    default_color: str = "yellow"

    @model_validator(mode="after")
    def default_color_in_palette(self) -> AnchorConfig:
        if self.default_color not in self.colors:
            msg = (
                f"ANCHOR__DEFAULT_COLOR {self.default_color!r} "
                f"is not one of {', '.join(self.colors)}"
            )
            raise ValueError(msg)
        return self


class RestoreConfig(BaseModel):
    """Bounded wait for the document to settle before restoration."""

    stabilize_timeout: float = Field(default=2.0, ge=0)
    quiet_period: float = Field(default=0.3, ge=0)
    settle_delay: float = Field(default=0.1, ge=0)
    poll_interval: float = Field(default=0.05, gt=0)


class StoreConfig(BaseModel):
    """Annotation store backend."""

    backend: Literal["memory", "json"] = "json"
    path: Path = Path("data/annotations.json")


class AppConfig(BaseModel):
    """Application runtime configuration."""

    log_dir: Path = Path("logs")


# ---------------------------------------------------------------------------
# Root settings
# ---------------------------------------------------------------------------
class Settings(BaseSettings):
    """Settings with automatic .env loading and type validation.

    Environment variables use double-underscore delimiter for nesting:
    ``ANCHOR__CONTEXT_LENGTH``, ``STORE__BACKEND``, ``STORE__PATH``, etc.
    """

    model_config = SettingsConfigDict(
        env_file=_PROJECT_ROOT / ".env",
        env_nested_delimiter="__",
        extra="ignore",
    )

    anchor: AnchorConfig = AnchorConfig()
    restore: RestoreConfig = RestoreConfig()
    store: StoreConfig = StoreConfig()
    app: AppConfig = AppConfig()


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
