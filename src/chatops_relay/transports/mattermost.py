# -*- coding: utf-8 -*-
"""Mattermost transport: post rendered messages through the REST API."""

from __future__ import annotations

import re
import structlog
from typing import TYPE_CHECKING, Any, Callable, Optional
from cachetools import TTLCache

from chatops_relay.exceptions import MissingRequiredConfigError
from chatops_relay.models.notification import Envelope, OutboundMessage
from chatops_relay.transports.base import BaseTransport

if TYPE_CHECKING:
    from chatops_relay.clients.mattermost_api import MattermostApiClient
    from chatops_relay.config.config import Settings

# Mattermost ids are 26 lowercase base32 characters.
_MATTERMOST_ID_RE = re.compile(r"^[a-z0-9]{26}$")


class MattermostTransport(BaseTransport):
    """Deliver messages to Mattermost channels and direct messages.

    A room is resolved to a channel id once and cached:
    - a direct envelope (a whisper) or `@name` opens the direct channel
      between the bot and that user;
    - a 26-character Mattermost id is used as is;
    - `#name`, `~name` or `name` is looked up in the configured team.
    """

    def __init__(
        self,
        settings: "Settings",
        api: "MattermostApiClient",
        *,
        get_logger: Callable[[str], Any] = structlog.get_logger,
        logger_name: Optional[str] = None,
    ) -> None:
        super().__init__(settings)
        self._logger = get_logger(logger_name or self.__class__.__name__)
        self._api = api

        cfg = self.settings.mattermost
        if not cfg.url or not cfg.token:
            raise MissingRequiredConfigError("MATTERMOST__URL and MATTERMOST__TOKEN")

        self.team: Optional[str] = cfg.team
        self._rooms: TTLCache[str, str] = TTLCache(
            maxsize=cfg.room_cache_size,
            ttl=cfg.room_cache_ttl_seconds,
        )
        self._bot_user_id: Optional[str] = None
        self._running = False

    @property
    def is_running(self) -> bool:
        return self._running

    async def initialize(self) -> None:
        if self._running:
            self._logger.warning("mattermost_already_running")
            return
        me = await self._api.get_me()
        self._bot_user_id = me.get("id")
        self._running = True
        self._logger.info(
            "mattermost_transport_ready",
            mattermost_bot_username=me.get("username"),
        )

    async def shutdown(self) -> None:
        if not self._running:
            return
        self._running = False
        self._rooms.clear()
        await self._api.aclose()

    async def send(self, envelope: Envelope, message: OutboundMessage) -> None:
        channel_id = await self.resolve_channel_id(envelope.room, direct=envelope.direct)
        await self._api.create_post(
            channel_id,
            message.message or "",
            props=message.props,
        )

    async def send_text(self, envelope: Envelope, text: str) -> None:
        channel_id = await self.resolve_channel_id(envelope.room, direct=envelope.direct)
        await self._api.create_post(channel_id, text)

    async def resolve_channel_id(self, room: str, *, direct: bool = False) -> str:
        """Return the channel id for a room name, user name or id.

        With `direct`, `room` is always a user name and the direct channel
        with that user is returned, whatever channels share the name.
        """
        if direct or room.startswith("@"):
            username = room[1:] if room.startswith("@") else room
            key = f"@{username}"
        else:
            username = None
            key = room

        cached = self._rooms.get(key)
        if cached is not None:
            return cached

        if username is not None:
            channel_id = await self._direct_channel_id(username)
        elif _MATTERMOST_ID_RE.match(room):
            channel_id = room
        else:
            channel_id = await self._named_channel_id(room)

        self._rooms[key] = channel_id
        return channel_id

    async def _named_channel_id(self, room: str) -> str:
        if not self.team:
            raise MissingRequiredConfigError("MATTERMOST__TEAM")
        name = room[1:] if room[:1] in ("#", "~") else room
        channel = await self._api.get_channel_by_name(self.team, name)
        return str(channel["id"])

    async def _direct_channel_id(self, username: str) -> str:
        if self._bot_user_id is None:
            self._bot_user_id = (await self._api.get_me())["id"]
        user = await self._api.get_user_by_username(username)
        channel = await self._api.create_direct_channel(self._bot_user_id, user["id"])
        self._logger.debug("mattermost_direct_channel_opened", mattermost_user=username)
        return str(channel["id"])
