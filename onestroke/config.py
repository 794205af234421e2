"""Process configuration from environment variables."""

from __future__ import annotations

import logging

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    env: str = "development"
    log_level: str = "info"

    # Gameplay feel (viewport pixels / seconds)
    tolerance: float = 16.0
    completion_threshold: float = 0.99
    merge_threshold: float = 15.0
    reset_delay: float = 1.5

    model_config = SettingsConfigDict(
        env_prefix="ONESTROKE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


settings = Settings()


def configure_logging(level: str | None = None) -> None:
    """Install the root handler. Hosts call this once; importing never does."""
    name = (level or settings.log_level).upper()
    logging.basicConfig(
        level=getattr(logging, name, logging.INFO),
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )
