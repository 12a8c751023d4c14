"""Logging setup (structlog + Logfire)."""

from chatops_relay.logging.config import configure_logging

__all__ = ["configure_logging"]
