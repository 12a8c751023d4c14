# -*- coding: utf-8 -*-
"""Application services."""

from chatops_relay.services.announcements import AnnouncementListener

__all__ = ["AnnouncementListener"]
