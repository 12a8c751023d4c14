"""Notification records and the outbound shapes rendered from them.

A NotificationRecord is what the upstream pipeline announces. The dispatcher
turns it into one Envelope and an ordered list of RenderedChunk, none of
which outlive the delivery call.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from chatops_relay.exceptions import InvalidNotificationError


def _freeze(value: Mapping[str, Any] | None) -> Mapping[str, Any] | None:
    if value is None:
        return None
    return MappingProxyType(dict(value))


@dataclass(frozen=True, slots=True)
class NotificationRecord:
    """Outbound notification as produced by the automation pipeline."""

    message: str
    """Raw text, before any platform formatting."""
    channel: str = ""
    """Target channel, used unless whispering to a user."""
    user: str | None = None
    """Target user, for direct messages or @-mentions."""
    whisper: bool = False
    """Deliver as a direct message to `user` instead of the channel."""
    extra: Mapping[str, Any] | None = None
    """Presentation hints: `color` and per-platform style overrides."""

    def __post_init__(self) -> None:
        # Read-only view over a private copy; callers keep their own dict.
        object.__setattr__(self, "message", self.message or "")
        object.__setattr__(self, "extra", _freeze(self.extra))

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> NotificationRecord:
        """Build a record from an announcement payload (message/channel/user/whisper/extra)."""
        message = payload.get("message")
        if message is not None and not isinstance(message, str):
            message = str(message)
        channel = payload.get("channel") or ""
        user = payload.get("user") or None
        if not channel and not user:
            raise InvalidNotificationError(
                "announcement needs a channel or a user", field="channel"
            )
        extra = payload.get("extra")
        if extra is not None and not isinstance(extra, Mapping):
            raise InvalidNotificationError("extra must be a mapping", field="extra")
        return cls(
            message=message or "",
            channel=str(channel),
            user=str(user) if user is not None else None,
            whisper=bool(payload.get("whisper", False)),
            extra=extra,
        )

    def style_overrides(self, platform: str) -> Mapping[str, Any] | None:
        """Return `extra[platform]` when it is a mapping, else None."""
        if not self.extra:
            return None
        overrides = self.extra.get(platform)
        if isinstance(overrides, Mapping):
            return overrides
        return None


@dataclass(frozen=True, slots=True)
class Envelope:
    """Resolved delivery target."""

    room: str
    direct: bool = False
    """`room` names a user to message privately, never a channel."""


@dataclass(frozen=True, slots=True)
class SplitMessage:
    """Formatted text separated into a short pretext and body chunks.

    `text` is None when there is no body; the pretext is then sent as plain text.
    """

    pretext: str = ""
    text: list[str] | None = None


@dataclass(frozen=True, slots=True)
class OutboundMessage:
    """A chat message with attachments, as handed to a transport."""

    attachments: list[dict[str, Any]]
    message: str | None = None

    @property
    def props(self) -> dict[str, Any]:
        return {"attachments": self.attachments}

    def to_payload(self) -> dict[str, Any]:
        """Return the `{props: {attachments}, message}` dict."""
        return {"props": self.props, "message": self.message}


@dataclass(frozen=True, slots=True)
class RenderedChunk:
    """One outbound unit of a chunked message."""

    text: str
    attachment_payload: list[dict[str, Any]]
    routing: Envelope
    message: str | None = None

    def to_outbound(self) -> OutboundMessage:
        return OutboundMessage(attachments=self.attachment_payload, message=self.message)


@dataclass(frozen=True, slots=True)
class RenderPlan:
    """Everything needed to deliver one record.

    Either `direct_text` is set (plain-text send, no attachments) or `chunks`
    holds the ordered attachment messages.
    """

    envelope: Envelope
    chunks: list[RenderedChunk] = field(default_factory=list)
    direct_text: str | None = None

    @property
    def is_direct(self) -> bool:
        """True when the record is sent as plain text without attachments."""
        return self.direct_text is not None
