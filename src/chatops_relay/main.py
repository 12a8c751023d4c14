# -*- coding: utf-8 -*-
"""
Entry point for the chatops relay.

Orchestrates: logging, settings, container, adapter, announcement listener, shutdown (EOF, SIGINT or CancelledError).
Announcements flow: stdin (one JSON object per line) -> event bus -> AnnouncementListener -> chat adapter.

Run with: python -m chatops_relay.main < announcements.jsonl

Each line looks like:
    {"message": "...", "channel": "ops", "user": "alice", "whisper": false, "extra": {"color": "#ff0000"}}
"""
from __future__ import annotations

import asyncio
import json
import signal
import sys
import threading
import structlog
from typing import IO, Any, Optional

from pydantic import ValidationError

from chatops_relay.DI import Container
from chatops_relay.events.announcement_events import ChatOpsAnnouncementEvent
from chatops_relay.logging.config import configure_logging


def _setup_sigint(shutdown_event: asyncio.Event) -> None:
    try:
        loop = asyncio.get_running_loop()
        loop.add_signal_handler(
            signal.SIGINT,
            lambda: shutdown_event.set(),
        )
    except NotImplementedError:
        pass  # Windows has no add_signal_handler


def parse_announcement(line: str, logger: Any) -> Optional[ChatOpsAnnouncementEvent]:
    """Parse one JSON line into an announcement event. Returns None (and logs) when invalid."""
    line = line.strip()
    if not line:
        return None
    try:
        payload = json.loads(line)
    except json.JSONDecodeError as exc:
        logger.warning("main_announcement_malformed_json", error_message=str(exc))
        return None
    if not isinstance(payload, dict):
        logger.warning("main_announcement_not_an_object", payload_type=type(payload).__name__)
        return None
    fields = ("message", "channel", "user", "whisper", "extra")
    try:
        return ChatOpsAnnouncementEvent(**{k: payload[k] for k in fields if k in payload})
    except ValidationError as exc:
        logger.warning("main_announcement_invalid", error_count=exc.error_count())
        return None


def _start_reader(stream: IO[str], lines: asyncio.Queue[Optional[str]]) -> threading.Thread:
    """Read `stream` on a daemon thread so a blocked read never holds up shutdown.

    Puts every line into `lines`, then None at EOF.
    """
    loop = asyncio.get_running_loop()

    def _read() -> None:
        try:
            for line in stream:
                loop.call_soon_threadsafe(lines.put_nowait, line)
            loop.call_soon_threadsafe(lines.put_nowait, None)
        except RuntimeError:
            return  # loop closed during shutdown

    reader = threading.Thread(target=_read, name="announcement-reader", daemon=True)
    reader.start()
    return reader


async def _pump(
    lines: asyncio.Queue[Optional[str]],
    event_bus: Any,
    shutdown_event: asyncio.Event,
    logger: Any,
) -> None:
    """Publish each parsed line on the bus until EOF."""
    published = 0
    while True:
        line = await lines.get()
        if line is None:
            break
        event = parse_announcement(line, logger)
        if event is not None:
            event_bus.dispatch(event)
            published += 1
    logger.info("main_input_exhausted", announcements_published=published)
    shutdown_event.set()


async def run(stream: Optional[IO[str]] = None) -> None:
    configure_logging()
    logger = structlog.get_logger("main")

    container = Container()
    adapter = container.chat_adapter()
    listener = container.announcement_listener()
    event_bus = container.event_bus()

    await adapter.initialize()
    listener.start()
    shutdown_event = asyncio.Event()
    _setup_sigint(shutdown_event)

    lines: asyncio.Queue[Optional[str]] = asyncio.Queue()
    _start_reader(stream if stream is not None else sys.stdin, lines)
    pump_task = asyncio.create_task(_pump(lines, event_bus, shutdown_event, logger))
    logger.info("main_relay_started")

    try:
        await shutdown_event.wait()
    finally:
        pump_task.cancel()
        try:
            await pump_task
        except asyncio.CancelledError:
            pass
        await event_bus.wait_until_idle()
        listener.stop()
        await adapter.shutdown()
        logger.info("main_shutdown_complete")


def main() -> None:
    asyncio.run(run())


__all__ = ["run", "main", "parse_announcement"]

if __name__ == "__main__":
    main()
