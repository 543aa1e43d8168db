"""Lightweight configuration for the Kingdoms tools."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

StorageBackend = Literal["memory", "json", "sql"]


class Settings(BaseSettings):
    """Application settings, read from ``KINGDOMS_*`` environment variables or ``.env``."""

    model_config = SettingsConfigDict(
        env_prefix="KINGDOMS_", env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    storage_backend: StorageBackend = Field(
        default="json", description="Where entities are persisted: memory, json or sql"
    )
    data_dir: Path = Field(
        default=Path("kingdoms_data"), description="Directory for JSON snapshots"
    )
    database_url: str = Field(
        default="sqlite:///kingdoms.db", description="SQLAlchemy URL used by the sql backend"
    )
    database_echo: bool = Field(default=False, description="Log every SQL statement")
    log_level: str = Field(default="INFO", description="Root logging level for the CLI")


@lru_cache
def get_settings() -> Settings:
    """Return a cached Settings instance."""

    settings = Settings()
    if settings.storage_backend == "json":
        settings.data_dir.mkdir(parents=True, exist_ok=True)
    return settings
