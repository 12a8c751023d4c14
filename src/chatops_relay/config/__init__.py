"""Configuration subpackage."""

from chatops_relay.config.config import (
    AppSettings,
    DeliverySettings,
    LoggingSettings,
    MattermostSettings,
    Settings,
    get_settings,
)

__all__ = [
    "AppSettings",
    "DeliverySettings",
    "LoggingSettings",
    "MattermostSettings",
    "Settings",
    "get_settings",
]
