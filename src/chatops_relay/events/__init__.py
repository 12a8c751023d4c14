# -*- coding: utf-8 -*-
"""Event types published on the announcement bus."""

from chatops_relay.events.announcement_events import ChatOpsAnnouncementEvent

__all__ = ["ChatOpsAnnouncementEvent"]
