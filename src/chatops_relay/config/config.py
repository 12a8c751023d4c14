# -*- coding: utf-8 -*-
"""Configuration loaded from environment via Pydantic Settings.

Nested env vars use <section>__<key>, e.g. LOGGING__CONSOLE_LEVEL, DELIVERY__FAIL_COLOR.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseSettings):
    """General application configuration."""

    model_config = SettingsConfigDict(extra="ignore")

    app_name: str = "chatops-relay"
    service_name: Optional[str] = None
    service_version: Optional[str] = None
    environment: Literal["development", "test", "production"] = "development"


class LoggingSettings(BaseSettings):
    """Structured logging configuration for structlog/stdlib/Logfire."""

    model_config = SettingsConfigDict(extra="ignore")

    # Per-target levels (only the 5 standard levels)
    console_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    file_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    logfire_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"

    # Local outputs. Console logs go to stderr; stdout is reserved for the console transport.
    log_to_console: bool = True
    log_to_file: bool = False
    log_file_path: str = "logs/chatops_relay.log"
    # TimedRotatingFileHandler: when to rotate (S/M/H/D/W0–W6/midnight), interval, backups to keep
    log_file_when: Literal[
        "S", "M", "H", "D", "W0", "W1", "W2", "W3", "W4", "W5", "W6", "midnight"
    ] = "midnight"
    log_file_interval: int = 1
    log_file_backup_count: int = 30
    log_file_utc: bool = True

    # Main output format: JSONRenderer if True, ConsoleRenderer if False
    json_format: bool = False

    # Logfire integration via structlog
    logfire_enabled: bool = False
    logfire_token: Optional[str] = None


class DeliverySettings(BaseSettings):
    """Presentation and pacing of outbound chat messages (from env DELIVERY__*)."""

    model_config = SettingsConfigDict(extra="ignore")

    success_color: str = Field(
        default="dfdfdf",
        description="Attachment color used when no explicit color is given.",
    )
    fail_color: str = Field(
        default="danger",
        description="Attachment color used when the message looks like a failed execution.",
    )
    failure_marker: str = Field(
        default="status : failed",
        description="Case-sensitive substring that switches the color to fail_color.",
    )
    chunk_size: int = Field(
        default=3800,
        ge=1,
        le=16000,
        description="Maximum length of a single attachment text chunk.",
    )
    chunk_delay_seconds: float = Field(
        default=0.3,
        ge=0.0,
        le=60.0,
        description="Pause between consecutive chunks of the same message.",
    )
    shutdown_timeout_seconds: float = Field(
        default=10.0,
        ge=0.0,
        le=600.0,
        description="How long shutdown waits for in-flight deliveries before cancelling them.",
    )
    pretext_separator: str = Field(
        default="{~}",
        min_length=1,
        description="Separator between the pretext and the body of a message.",
    )
    transport: Literal["mattermost", "console"] = Field(
        default="console",
        description="Backend the adapter delivers to.",
    )


class MattermostSettings(BaseSettings):
    """Mattermost REST API connection (from env MATTERMOST__*)."""

    # Prefixed so a bare TOKEN/URL in the environment is never picked up.
    model_config = SettingsConfigDict(extra="ignore", env_prefix="MATTERMOST_")

    url: Optional[str] = Field(default=None, description="Mattermost server base URL.")
    token: Optional[str] = Field(default=None, description="Bot or personal access token.")
    team: Optional[str] = Field(
        default=None,
        description="Team name used to resolve channel names.",
    )
    timeout_seconds: float = Field(default=15.0, ge=1.0, le=120.0)
    max_retries: int = Field(default=5, ge=1, le=20)
    room_cache_ttl_seconds: float = Field(default=600.0, ge=1.0, le=86400.0)
    room_cache_size: int = Field(default=512, ge=1, le=100000)


class Settings(BaseSettings):
    """Root application configuration.

    Groups all sub-configurations so the rest of the code does not
    read environment variables directly. Nested overrides use
    <section>__<key>, e.g. LOGGING__CONSOLE_LEVEL, MATTERMOST__URL.
    """

    model_config = SettingsConfigDict(
        env_nested_delimiter="__",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
    )

    app: AppSettings = Field(default_factory=AppSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    delivery: DeliverySettings = Field(default_factory=DeliverySettings)
    mattermost: MattermostSettings = Field(default_factory=MattermostSettings)


@lru_cache
def get_settings() -> Settings:
    """Return a single cached instance of Settings.

    Typical usage:

        from chatops_relay.config import get_settings

        settings = get_settings()
        fail_color = settings.delivery.fail_color
    """
    return Settings()
