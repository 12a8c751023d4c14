# -*- coding: utf-8 -*-
"""Console transport (print-based), for dry runs."""

from __future__ import annotations

import json
from typing import Any

from chatops_relay.models.notification import Envelope, OutboundMessage
from chatops_relay.transports.base import BaseTransport
from chatops_relay.config import Settings


def _target(envelope: Envelope) -> dict[str, Any]:
    if envelope.direct:
        return {"room": envelope.room, "direct": True}
    return {"room": envelope.room}


class ConsoleTransport(BaseTransport):
    """Print each outbound message to stdout as one JSON line."""

    def __init__(self, settings: "Settings") -> None:
        super().__init__(settings)
        self._running = False

    @property
    def is_running(self) -> bool:
        return self._running

    async def initialize(self) -> None:
        self._running = True

    async def shutdown(self) -> None:
        self._running = False

    async def send(self, envelope: Envelope, message: OutboundMessage) -> None:
        self._emit({**_target(envelope), **message.to_payload()})

    async def send_text(self, envelope: Envelope, text: str) -> None:
        self._emit({**_target(envelope), "message": text})

    def _emit(self, line: dict[str, Any]) -> None:
        if not self._running:
            return
        print(json.dumps(line, ensure_ascii=False, default=str), flush=True)
