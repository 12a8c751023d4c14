# -*- coding: utf-8 -*-
"""Chat adapter interface."""

from __future__ import annotations

from abc import ABC, abstractmethod

from chatops_relay.models.notification import NotificationRecord


class ChatAdapter(ABC):
    """A chat backend that accepts notification records for delivery."""

    @property
    @abstractmethod
    def is_running(self) -> bool:
        pass

    @abstractmethod
    async def initialize(self) -> None:
        pass

    @abstractmethod
    async def shutdown(self) -> None:
        """Finish pending deliveries and release the backend."""
        pass

    @abstractmethod
    def dispatch(self, record: NotificationRecord) -> None:
        """Schedule delivery of a record and return without waiting for it."""
        pass

    @abstractmethod
    async def deliver(self, record: NotificationRecord) -> None:
        """Deliver a record and return once every message has been sent."""
        pass
