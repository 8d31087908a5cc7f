"""Bridge settings and configuration management."""

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Bridge settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Store platform (drives capability gating)
    store_platform: Literal["ios", "macos"] = Field(
        default="ios",
        description="Platform the store API runs on",
    )
    store_platform_version: str = Field(
        default="18.0",
        description="Platform version, e.g. 17.4 (controls offer capabilities)",
    )

    # Outbound transaction updates
    transaction_webhook_url: str | None = Field(
        default=None,
        description="URL receiving onTransactionsUpdated pushes (unset: updates are dropped)",
    )
    transaction_webhook_timeout_seconds: float = Field(
        default=10.0,
        description="Timeout for a single webhook delivery",
    )

    # Listener
    listen_on_startup: bool = Field(
        default=True,
        description="Start the transaction listener when the host API starts",
    )

    # Host API
    bridge_host: str = Field(
        default="0.0.0.0",
        description="Server host",
    )
    bridge_port: int = Field(
        default=8000,
        description="Server port",
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Logging level",
    )
    log_format: Literal["json", "text"] = Field(
        default="text",
        description="Log format",
    )

    # Development
    debug: bool = Field(
        default=False,
        description="Enable debug mode",
    )


@lru_cache
def get_settings() -> Settings:
    """Get cached bridge settings."""
    return Settings()
