# -*- coding: utf-8 -*-
"""AnnouncementListener: relays ChatOpsAnnouncementEvent to a chat adapter."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Callable, Optional

import structlog

from chatops_relay.events.announcement_events import ChatOpsAnnouncementEvent
from chatops_relay.exceptions import InvalidNotificationError
from chatops_relay.models.notification import NotificationRecord

if TYPE_CHECKING:
    from bubus import EventBus  # type: ignore[import-untyped]

    from chatops_relay.adapters.base import ChatAdapter


class AnnouncementListener:
    """Subscribes to ChatOpsAnnouncementEvent and dispatches each one to the adapter."""

    def __init__(
        self,
        adapter: "ChatAdapter",
        event_bus: Any,
        *,
        get_logger: Callable[[str], Any] = structlog.get_logger,
        logger_name: Optional[str] = None,
    ) -> None:
        self._adapter = adapter
        self._event_bus: "EventBus" = event_bus
        self._logger = get_logger(logger_name or self.__class__.__name__)

    def start(self) -> None:
        """Subscribe to ChatOpsAnnouncementEvent."""
        self._event_bus.on(ChatOpsAnnouncementEvent, self._on_announcement)
        self._logger.debug("announcement_listener_started")

    def stop(self) -> None:
        """Unsubscribe from ChatOpsAnnouncementEvent."""
        key = ChatOpsAnnouncementEvent.__name__
        handlers = getattr(self._event_bus, "handlers", {})
        if key in handlers:
            handlers[key] = [h for h in handlers[key] if h != self._on_announcement]
        self._logger.debug("announcement_listener_stopped")

    def _on_announcement(self, event: ChatOpsAnnouncementEvent) -> None:
        """Turn the event into a NotificationRecord and hand it to the adapter."""
        try:
            record = NotificationRecord.from_payload(event.to_payload())
        except InvalidNotificationError as exc:
            self._logger.warning(
                "announcement_invalid",
                announcement_field=exc.field,
                error_message=str(exc),
            )
            return
        self._logger.debug(
            "announcement_received",
            announcement_channel=record.channel,
            announcement_whisper=record.whisper,
        )
        self._adapter.dispatch(record)
