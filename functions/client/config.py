"""
Configuration for the client-side session.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ClientSettings(BaseSettings):
    """Environment-backed settings, read with the PORTFOLIO_ prefix."""

    model_config = SettingsConfigDict(
        env_prefix="PORTFOLIO_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    api_base: str = Field(default="http://localhost:5000/api")
    request_timeout: float = Field(default=10.0)

    probe_interval_seconds: float = Field(default=30.0)
    notification_timeout_seconds: float = Field(default=5.0)
    theme_notification_timeout_seconds: float = Field(default=2.0)

    # Persisted state: Redis when configured, else a JSON file, else memory.
    redis_url: Optional[str] = Field(default=None)
    storage_path: Optional[str] = Field(default=None)


@lru_cache(maxsize=1)
def get_client_settings() -> ClientSettings:
    """Return cached settings instance."""
    return ClientSettings()
