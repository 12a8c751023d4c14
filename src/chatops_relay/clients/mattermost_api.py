# -*- coding: utf-8 -*-
"""Mattermost REST API v4 client (posts, users, channels)."""

from __future__ import annotations

import structlog
from typing import TYPE_CHECKING, Any, Callable, Dict, Optional, cast
from urllib.parse import quote

from chatops_relay.config import Settings
from chatops_relay.exceptions import MissingRequiredConfigError

if TYPE_CHECKING:
    from chatops_relay.clients.http import AsyncHttpClient


class MattermostApiClient:
    """Thin client over the Mattermost endpoints the transport needs."""

    def __init__(
        self,
        http_client: "AsyncHttpClient",
        settings: Settings,
        *,
        get_logger: Callable[[str], Any] = structlog.get_logger,
        logger_name: Optional[str] = None,
    ) -> None:
        """Initialize the client.

        Args:
            http_client: Async HTTP client (e.g. AsyncHttpClient).
            settings: Application settings (uses settings.mattermost.url).
            get_logger: Logger factory (injected) with default of structlog.get_logger.
            logger_name: Optional logger name (defaults to class name).
        """
        self._http = http_client
        self._settings = settings
        self._logger = get_logger(logger_name or self.__class__.__name__)

    def _api(self, path: str) -> str:
        base = self._settings.mattermost.url
        if not base:
            raise MissingRequiredConfigError("MATTERMOST__URL")
        return f"{base.rstrip('/')}/api/v4{path}"

    async def create_post(
        self,
        channel_id: str,
        message: str,
        *,
        props: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """Create a post in a channel. Returns the created post."""
        body: Dict[str, Any] = {"channel_id": channel_id, "message": message}
        if props is not None:
            body["props"] = props
        data = await self._http.post(self._api("/posts"), json=body)
        self._logger.debug(
            "mattermost_post_created",
            mattermost_channel_id=channel_id,
            mattermost_post_id=(data or {}).get("id"),
        )
        return cast(Dict[str, Any], data)

    async def get_me(self) -> Dict[str, Any]:
        """Return the user the token belongs to."""
        return cast(Dict[str, Any], await self._http.get(self._api("/users/me")))

    async def get_user_by_username(self, username: str) -> Dict[str, Any]:
        path = f"/users/username/{quote(username, safe='')}"
        return cast(Dict[str, Any], await self._http.get(self._api(path)))

    async def get_channel_by_name(self, team: str, name: str) -> Dict[str, Any]:
        path = f"/teams/name/{quote(team, safe='')}/channels/name/{quote(name, safe='')}"
        return cast(Dict[str, Any], await self._http.get(self._api(path)))

    async def create_direct_channel(self, user_id: str, other_user_id: str) -> Dict[str, Any]:
        """Create (or fetch, if it exists) the direct channel between two users."""
        data = await self._http.post(
            self._api("/channels/direct"),
            json=[user_id, other_user_id],
        )
        return cast(Dict[str, Any], data)

    async def aclose(self) -> None:
        """Close the underlying HTTP client."""
        await self._http.aclose()
