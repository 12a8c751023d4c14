"""Announcement ingestion."""

from chatops_relay.services.announcements.announcement_listener import AnnouncementListener

__all__ = ["AnnouncementListener"]
