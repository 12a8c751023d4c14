# -*- coding: utf-8 -*-
"""Routing and styling decisions shared by every chat adapter."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from chatops_relay.models.notification import Envelope, NotificationRecord

if TYPE_CHECKING:  # pragma: no cover
    from chatops_relay.config import DeliverySettings

MARKUP_FIELDS = ("text", "pretext")


@dataclass(frozen=True, slots=True)
class Route:
    """Where a record goes and how its first line addresses the user."""

    envelope: Envelope
    mention: str = ""


def resolve_route(record: NotificationRecord) -> Route:
    """Whisper to the user when asked to, otherwise post to the channel and @-mention the user."""
    if record.whisper and record.user:
        return Route(envelope=Envelope(room=record.user, direct=True))
    mention = f"@{record.user}: " if record.user and not record.whisper else ""
    return Route(envelope=Envelope(room=record.channel), mention=mention)


def resolve_color(record: NotificationRecord, delivery: "DeliverySettings") -> str:
    """Pick the attachment color.

    An explicit `extra.color` always wins. Otherwise the success color is used,
    unless the raw message contains the failure marker (plain substring match).
    """
    if record.extra and record.extra.get("color"):
        return str(record.extra["color"])
    if delivery.failure_marker in record.message:
        return delivery.fail_color
    return delivery.success_color


def build_presentation(color: str, overrides: Mapping[str, Any] | None = None) -> dict[str, Any]:
    """Default attachment attributes with caller overrides merged on top (shallow, unvalidated)."""
    presentation: dict[str, Any] = {
        "color": color,
        "mrkdwn_in": list(MARKUP_FIELDS),
    }
    if overrides:
        presentation.update(overrides)
    return presentation


def chunk_attachments(presentation: Mapping[str, Any], chunk: str) -> list[dict[str, Any]]:
    """Attachments for one chunk.

    A custom `attachments` list in the presentation is sent as-is; otherwise
    the presentation itself, carrying the chunk text, is the only attachment.
    """
    custom = presentation.get("attachments")
    if isinstance(custom, list):
        return [dict(item) if isinstance(item, Mapping) else item for item in custom]
    attachment = dict(presentation)
    attachment["text"] = chunk
    attachment["fallback"] = chunk
    return [attachment]
