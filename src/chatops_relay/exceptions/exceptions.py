"""Custom exceptions for notification delivery."""

from __future__ import annotations


class ChatOpsError(Exception):
    """Base exception for chatops relay errors."""

    pass


class MissingRequiredConfigError(ChatOpsError):
    """Raised when a required configuration value is missing."""

    pass


class InvalidNotificationError(ChatOpsError):
    """Raised when an announcement payload cannot be turned into a NotificationRecord."""

    def __init__(self, message: str, *, field: str | None = None) -> None:
        super().__init__(message)
        self.field = field


class ChatTransportError(ChatOpsError):
    """Raised when a chat backend request fails after retries."""

    def __init__(
        self,
        message: str,
        *,
        url: str | None = None,
        status_code: int | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.url = url
        self.status_code = status_code
        self.cause = cause


class RateLimitError(ChatTransportError):
    """Raised when the backend keeps answering HTTP 429 (Too Many Requests)."""

    def __init__(
        self,
        message: str = "Rate limit exceeded (429)",
        *,
        url: str | None = None,
        retry_after: float | None = None,
    ) -> None:
        super().__init__(message, url=url, status_code=429)
        self.retry_after = retry_after
