"""Announcement events published by the upstream notification pipeline."""

from __future__ import annotations

from typing import Any

from bubus import BaseEvent  # type: ignore[import-untyped]


class ChatOpsAnnouncementEvent(BaseEvent[None]):
    """A notification to relay to chat.

    Handled by AnnouncementListener, which hands it to the chat adapter.
    """

    message: str = ""
    channel: str = ""
    user: str | None = None
    """Addressee: direct-message target when whispering, @-mentioned otherwise."""

    whisper: bool = False
    extra: dict[str, Any] | None = None
    """Presentation hints: `color` and per-platform overrides (e.g. `mattermost`)."""

    def to_payload(self) -> dict[str, Any]:
        return {
            "message": self.message,
            "channel": self.channel,
            "user": self.user,
            "whisper": self.whisper,
            "extra": self.extra,
        }
