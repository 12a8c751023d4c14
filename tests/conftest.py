# -*- coding: utf-8 -*-
"""Shared pytest fixtures for unit tests."""

from __future__ import annotations

from collections.abc import Callable
from types import SimpleNamespace
from typing import Any

import pytest

from chatops_relay.config.config import DeliverySettings, MattermostSettings
from chatops_relay.models.notification import Envelope, NotificationRecord, OutboundMessage
from chatops_relay.transports.base import BaseTransport

SUCCESS = "#00aa00"
FAIL = "#cc0000"


class RecordingTransport(BaseTransport):
    """Transport fake that records sends on a shared timeline."""

    def __init__(self, timeline: list[tuple[str, Any]] | None = None) -> None:
        super().__init__(settings=SimpleNamespace())
        self.timeline: list[tuple[str, Any]] = timeline if timeline is not None else []
        self.sent: list[tuple[Envelope, OutboundMessage]] = []
        self.texts: list[tuple[str, str]] = []
        self.running = False
        self.shutdown_calls = 0

    @property
    def is_running(self) -> bool:
        return self.running

    async def initialize(self) -> None:
        self.running = True

    async def shutdown(self) -> None:
        self.running = False
        self.shutdown_calls += 1

    async def send(self, envelope: Envelope, message: OutboundMessage) -> None:
        self.sent.append((envelope, message))
        self.timeline.append(("send", message))

    async def send_text(self, envelope: Envelope, text: str) -> None:
        self.texts.append((envelope.room, text))
        self.timeline.append(("text", text))


@pytest.fixture
def timeline() -> list[tuple[str, Any]]:
    """Ordered log of sends and sleeps."""
    return []


@pytest.fixture
def transport(timeline: list[tuple[str, Any]]) -> RecordingTransport:
    return RecordingTransport(timeline)


@pytest.fixture
def fake_sleep(timeline: list[tuple[str, Any]]) -> Callable[[float], Any]:
    """Sleep replacement that records the requested delay instead of waiting."""

    async def _sleep(delay: float) -> None:
        timeline.append(("sleep", delay))

    return _sleep


@pytest.fixture
def settings_factory() -> Callable[..., Any]:
    """Build minimal settings with explicit delivery values (env-independent)."""

    def _build(**delivery: Any) -> Any:
        values: dict[str, Any] = {
            "success_color": SUCCESS,
            "fail_color": FAIL,
            "chunk_size": 3800,
            "chunk_delay_seconds": 0.3,
        }
        values.update(delivery)
        return SimpleNamespace(
            delivery=DeliverySettings(**values),
            mattermost=MattermostSettings(
                url="https://chat.example.com",
                token="token-1",
                team="ops-team",
                max_retries=3,
            ),
        )

    return _build


@pytest.fixture
def settings(settings_factory: Callable[..., Any]) -> Any:
    return settings_factory()


@pytest.fixture
def record_factory() -> Callable[..., NotificationRecord]:
    """Build NotificationRecord with sensible defaults and easy overrides."""

    def _build(**overrides: Any) -> NotificationRecord:
        return NotificationRecord(
            message=overrides.pop("message", "hello"),
            channel=overrides.pop("channel", "ops"),
            user=overrides.pop("user", None),
            whisper=overrides.pop("whisper", False),
            extra=overrides.pop("extra", None),
        )

    return _build
