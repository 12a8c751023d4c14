# -*- coding: utf-8 -*-
"""Domain models."""

from chatops_relay.models.notification import (
    Envelope,
    NotificationRecord,
    OutboundMessage,
    RenderedChunk,
    RenderPlan,
    SplitMessage,
)

__all__ = [
    "Envelope",
    "NotificationRecord",
    "OutboundMessage",
    "RenderedChunk",
    "RenderPlan",
    "SplitMessage",
]
