# -*- coding: utf-8 -*-
"""Mattermost chat adapter."""

from __future__ import annotations

import structlog
from typing import TYPE_CHECKING, Any, Callable, Optional

from chatops_relay.adapters.base import ChatAdapter
from chatops_relay.delivery import MessageDispatcher
from chatops_relay.models.notification import NotificationRecord

if TYPE_CHECKING:
    from chatops_relay.config import Settings
    from chatops_relay.formatting import ChunkSplitter, TextFormatter
    from chatops_relay.transports.base import BaseTransport


class MattermostAdapter(ChatAdapter):
    """Deliver notifications as Mattermost attachment posts.

    Style overrides are read from `extra["mattermost"]`. A caller may pass a
    complete `attachments` list there (author, title, links, fields) to take
    full control of the post layout.
    """

    platform = "mattermost"

    def __init__(
        self,
        settings: "Settings",
        transport: "BaseTransport",
        *,
        formatter: Optional["TextFormatter"] = None,
        splitter: Optional["ChunkSplitter"] = None,
        dispatcher: Optional[MessageDispatcher] = None,
        get_logger: Callable[[str], Any] = structlog.get_logger,
        logger_name: Optional[str] = None,
    ) -> None:
        self._logger = get_logger(logger_name or self.__class__.__name__)
        self._transport = transport
        self._shutdown_timeout = settings.delivery.shutdown_timeout_seconds
        self._dispatcher = dispatcher or MessageDispatcher(
            transport,
            settings,
            platform=self.platform,
            formatter=formatter,
            splitter=splitter,
            get_logger=get_logger,
        )
        self._running = False

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def dispatcher(self) -> MessageDispatcher:
        return self._dispatcher

    async def initialize(self) -> None:
        if self._running:
            return
        await self._transport.initialize()
        self._running = True
        self._logger.debug("mattermost_adapter_started")

    async def shutdown(self) -> None:
        if not self._running:
            return
        self._running = False
        pending = self._dispatcher.pending_count
        self._logger.debug("mattermost_adapter_draining", dispatch_pending=pending)
        if not await self._dispatcher.drain(self._shutdown_timeout):
            cancelled = self._dispatcher.cancel_pending()
            self._logger.warning(
                "mattermost_adapter_drain_timeout",
                dispatch_cancelled=cancelled,
                shutdown_timeout_seconds=self._shutdown_timeout,
            )
            await self._dispatcher.drain()
        await self._transport.shutdown()
        self._logger.debug("mattermost_adapter_stopped")

    def dispatch(self, record: NotificationRecord) -> None:
        if not self._running:
            raise RuntimeError("MattermostAdapter not initialized")
        self._dispatcher.dispatch(record)

    async def deliver(self, record: NotificationRecord) -> None:
        await self._dispatcher.deliver(record)
