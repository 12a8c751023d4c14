"""Exceptions subpackage."""

from chatops_relay.exceptions.exceptions import (
    ChatOpsError,
    ChatTransportError,
    InvalidNotificationError,
    MissingRequiredConfigError,
    RateLimitError,
)

__all__ = [
    "ChatOpsError",
    "ChatTransportError",
    "InvalidNotificationError",
    "MissingRequiredConfigError",
    "RateLimitError",
]
