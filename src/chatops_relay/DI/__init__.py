"""Dependency injection."""

from chatops_relay.DI.container import Container

__all__ = ["Container"]
