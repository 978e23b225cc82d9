"""
Application settings with environment variable support.

Configuration is loaded from environment variables with optional .env file.
"""

from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


def _default_config_dir() -> Path:
    return Path.home() / ".bugreport_analyzer"


class Settings(BaseSettings):
    """Application settings from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    # Per-user state (keywords, preferences, recent projects)
    config_dir: Path = Field(
        default_factory=_default_config_dir, alias="BUGREPORT_CONFIG_DIR"
    )

    # Streaming copy buffer used for extraction and splitting
    copy_buffer_bytes: int = Field(
        default=64 * 1024, ge=1024, alias="BUGREPORT_COPY_BUFFER_BYTES"
    )

    recent_projects_limit: int = Field(
        default=10, ge=1, alias="BUGREPORT_RECENT_LIMIT"
    )
    log_level: str = Field(default="INFO", alias="BUGREPORT_LOG_LEVEL")


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
