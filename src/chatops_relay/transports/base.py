# -*- coding: utf-8 -*-
"""Base chat transport."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from chatops_relay.models.notification import Envelope, OutboundMessage

if TYPE_CHECKING:  # pragma: no cover
    from chatops_relay.config.config import Settings


class BaseTransport(ABC):
    """Abstract base class for chat backends that deliver rendered messages."""

    def __init__(self, settings: "Settings"):
        """
        Initialize the base transport.

        Args:
            settings: Global configuration (Settings).
        """
        self.settings = settings

    @property
    @abstractmethod
    def is_running(self) -> bool:
        """Whether the transport is ready to send."""
        pass

    @abstractmethod
    async def initialize(self) -> None:
        pass

    @abstractmethod
    async def shutdown(self) -> None:
        pass

    @abstractmethod
    async def send(self, envelope: Envelope, message: OutboundMessage) -> None:
        """
        Send a message with attachments.

        Args:
            envelope: Target room. A direct envelope must reach the user privately.
            message: Attachments plus optional top-level text.
        """
        pass

    @abstractmethod
    async def send_text(self, envelope: Envelope, text: str) -> None:
        """
        Send a plain-text message to a room, without attachments.

        Args:
            envelope: Target room.
            text: Message text.
        """
        pass
