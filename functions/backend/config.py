"""
Configuration and settings for the portfolio backend.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Environment-backed settings for the FastAPI service."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    api_prefix: str = Field(default="/api")
    service_name: str = Field(default="Portfolio backend")
    service_version: str = Field(default="1.0.0")

    # Append-only log of contact submissions (one JSON object per line)
    contact_log_path: str = Field(default="contacts.log")

    # Development toggles
    use_in_memory_backends: bool = Field(
        default=False, validation_alias="PORTFOLIO_USE_IN_MEMORY_BACKENDS"
    )

    cors_origins: list[str] = Field(
        default=[
            "http://localhost:3000",
            "http://127.0.0.1:5500",
            "http://localhost:5500",
            "*",
        ]
    )

    # Directory holding the built site; enables index.html fallback routing.
    static_dir: Optional[str] = Field(default=None)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached settings instance."""
    return Settings()
