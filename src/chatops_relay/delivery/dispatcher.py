# -*- coding: utf-8 -*-
"""MessageDispatcher: render a notification into chat messages and deliver them in order.

Delivery of one record is a forward-only loop: send chunk 0, pause, send
chunk 1, ... until every chunk is out. Each dispatch runs in its own task, so
several records can be in flight at once without sharing state.
"""

from __future__ import annotations

import asyncio
import structlog
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, Any, Optional
from structlog.contextvars import bound_contextvars

from chatops_relay.delivery.routing import (
    build_presentation,
    chunk_attachments,
    resolve_color,
    resolve_route,
)
from chatops_relay.formatting import MessageSplitter, SlackLikeFormatter
from chatops_relay.models.notification import NotificationRecord, RenderedChunk, RenderPlan

if TYPE_CHECKING:  # pragma: no cover
    from chatops_relay.config import Settings
    from chatops_relay.formatting import ChunkSplitter, TextFormatter
    from chatops_relay.transports.base import BaseTransport


class MessageDispatcher:
    """Route, style, chunk and pace one platform's outbound notifications."""

    def __init__(
        self,
        transport: "BaseTransport",
        settings: "Settings",
        *,
        platform: str,
        formatter: Optional["TextFormatter"] = None,
        splitter: Optional["ChunkSplitter"] = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
        get_logger: Callable[[str], Any] = structlog.get_logger,
        logger_name: Optional[str] = None,
    ) -> None:
        """Initialize the dispatcher.

        Args:
            transport: Backend that performs the actual sends.
            settings: Configuration (colors, chunk size, pacing).
            platform: Key of the style overrides in `record.extra` (e.g. "mattermost").
            formatter: Raw text -> platform markup. Defaults to SlackLikeFormatter.
            splitter: Pretext/chunk splitter. Defaults to MessageSplitter from settings.
            sleep: Pacing coroutine between chunks (injectable for tests).
            get_logger: Logger factory (injected) with default of structlog.get_logger.
            logger_name: Optional logger name (defaults to class name).
        """
        delivery = settings.delivery
        self._transport = transport
        self._settings = settings
        self.platform = platform
        self._formatter: "TextFormatter" = formatter or SlackLikeFormatter()
        self._splitter: "ChunkSplitter" = splitter or MessageSplitter(
            chunk_size=delivery.chunk_size,
            separator=delivery.pretext_separator,
        )
        self._sleep = sleep
        self.chunk_delay = delivery.chunk_delay_seconds
        self._logger = get_logger(logger_name or self.__class__.__name__)
        self._pending: set[asyncio.Task[None]] = set()

    @property
    def pending_count(self) -> int:
        """Number of dispatched records whose delivery has not finished."""
        return len(self._pending)

    def render(self, record: NotificationRecord) -> RenderPlan:
        """Compute envelope, styling and chunks for a record without sending anything."""
        route = resolve_route(record)
        color = resolve_color(record, self._settings.delivery)

        split = self._splitter.split(self._formatter.format(record.message))
        greeting = route.mention + split.pretext
        if not split.text:
            return RenderPlan(envelope=route.envelope, direct_text=greeting)

        presentation = build_presentation(color, record.style_overrides(self.platform))
        chunks = [
            RenderedChunk(
                text=text,
                attachment_payload=chunk_attachments(presentation, text),
                routing=route.envelope,
                # Greeting only on the first chunk, even if empty.
                message=greeting if index == 0 else None,
            )
            for index, text in enumerate(split.text)
        ]
        return RenderPlan(envelope=route.envelope, chunks=chunks)

    async def deliver(self, record: NotificationRecord) -> None:
        """Render and send a record, pausing between chunks. Errors propagate, no retry."""
        plan = self.render(record)
        room = plan.envelope.room

        if plan.is_direct:
            self._logger.debug("dispatch_direct_text", dispatch_room=room)
            await self._transport.send_text(plan.envelope, plan.direct_text or "")
            return

        total = len(plan.chunks)
        with bound_contextvars(dispatch_room=room, dispatch_chunks_total=total):
            self._logger.debug("dispatch_started")
            for index, chunk in enumerate(plan.chunks):
                await self._transport.send(chunk.routing, chunk.to_outbound())
                self._logger.debug("dispatch_chunk_sent", dispatch_chunk_index=index)
                if index + 1 < total:
                    await self._sleep(self.chunk_delay)
            self._logger.debug("dispatch_complete")

    def dispatch(self, record: NotificationRecord) -> None:
        """Schedule delivery of a record and return immediately (fire-and-forget).

        Must be called from a running event loop.
        """
        task = asyncio.create_task(self.deliver(record))
        self._pending.add(task)
        task.add_done_callback(self._on_delivery_done)

    async def drain(self, timeout: Optional[float] = None) -> bool:
        """Wait until every dispatched record has been delivered (or failed).

        Args:
            timeout: Upper bound in seconds. None waits as long as it takes.

        Returns:
            True if nothing is pending any more, False if the timeout expired
            first. Deliveries still running are left untouched.
        """
        loop = asyncio.get_running_loop()
        deadline = None if timeout is None else loop.time() + timeout
        while self._pending:
            remaining = None if deadline is None else deadline - loop.time()
            if remaining is not None and remaining <= 0:
                return False
            await asyncio.wait(list(self._pending), timeout=remaining)
        return True

    def cancel_pending(self) -> int:
        """Cancel in-flight deliveries. Returns how many were cancelled."""
        tasks = list(self._pending)
        for task in tasks:
            task.cancel()
        return len(tasks)

    def _on_delivery_done(self, task: asyncio.Task[None]) -> None:
        self._pending.discard(task)
        if task.cancelled():
            self._logger.warning("dispatch_delivery_cancelled")
            return
        exc = task.exception()
        if exc is not None:
            self._logger.error(
                "dispatch_delivery_failed",
                error_type=type(exc).__name__,
                error_message=str(exc),
                exc_info=exc,
            )
