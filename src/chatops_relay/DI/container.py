# -*- coding: utf-8 -*-
"""Dependency injection container (dependency-injector)."""

from __future__ import annotations

from bubus import EventBus  # type: ignore[import-untyped]
from dependency_injector import containers, providers

from chatops_relay.adapters import MattermostAdapter
from chatops_relay.clients import AsyncHttpClient, MattermostApiClient
from chatops_relay.config import Settings, get_settings
from chatops_relay.formatting import MessageSplitter, SlackLikeFormatter
from chatops_relay.services.announcements import AnnouncementListener
from chatops_relay.transports import BaseTransport, ConsoleTransport, MattermostTransport


def _build_splitter(settings: Settings) -> MessageSplitter:
    """Build the splitter with chunk size and separator from settings."""
    return MessageSplitter(
        chunk_size=settings.delivery.chunk_size,
        separator=settings.delivery.pretext_separator,
    )


def _build_transport(settings: Settings, api: MattermostApiClient) -> BaseTransport:
    if settings.delivery.transport == "mattermost":
        return MattermostTransport(settings=settings, api=api)
    return ConsoleTransport(settings=settings)


class Container(containers.DeclarativeContainer):
    """Application container. Wires settings, HTTP client, transport, adapter and listener."""

    config = providers.Callable(get_settings)

    http_client = providers.Singleton(
        AsyncHttpClient,
        settings=config,
    )

    mattermost_api = providers.Singleton(
        MattermostApiClient,
        http_client=http_client,
        settings=config,
    )

    transport = providers.Singleton(_build_transport, config, mattermost_api)

    text_formatter = providers.Singleton(SlackLikeFormatter)

    splitter = providers.Singleton(_build_splitter, config)

    chat_adapter = providers.Singleton(
        MattermostAdapter,
        settings=config,
        transport=transport,
        formatter=text_formatter,
        splitter=splitter,
    )

    # One bus per process; main publishes stdin announcements on it.
    event_bus = providers.Singleton(
        EventBus,
        name="ChatOpsRelay",
        max_history_size=100,
        wal_path=None,
    )

    announcement_listener = providers.Singleton(
        AnnouncementListener,
        adapter=chat_adapter,
        event_bus=event_bus,
    )
