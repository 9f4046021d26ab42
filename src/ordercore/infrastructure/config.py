"""Runtime settings read from ``ORDERCORE_*`` environment variables."""

from __future__ import annotations

from pathlib import Path

from pydantic import Field, PositiveInt, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Resolve data directory relative to the project root.
# When installed in editable mode the project root is the repo root.
_DATA_DIR = Path(__file__).resolve().parents[3] / "data"

_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class Settings(BaseSettings):

    model_config = SettingsConfigDict(
        env_prefix="ORDERCORE_",
        extra="ignore",
        env_ignore_empty=True,
        frozen=True,
    )

    database_url: str = Field(
        default=f"sqlite:///{_DATA_DIR / 'ordercore.db'}",
        description="SQLAlchemy database URL",
    )
    log_level: str = Field(default="WARNING", description="Root log level")
    auto_cancel_hours: PositiveInt = Field(
        default=72, description="Age after which unprocessed new orders are cancelled"
    )

    @field_validator("database_url", mode="before")
    def _strip_url(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator("log_level", mode="before")
    def _known_level(cls, v):
        level = str(v).strip().upper()
        if level not in _LEVELS:
            raise ValueError(f"unknown log level {v!r}")
        return level
