"""Notification rendering and paced delivery."""

from chatops_relay.delivery.dispatcher import MessageDispatcher
from chatops_relay.delivery.routing import (
    Route,
    build_presentation,
    chunk_attachments,
    resolve_color,
    resolve_route,
)

__all__ = [
    "MessageDispatcher",
    "Route",
    "build_presentation",
    "chunk_attachments",
    "resolve_color",
    "resolve_route",
]
