# -*- coding: utf-8 -*-
"""Async HTTP client with retries and rate-limit handling."""

from __future__ import annotations

import asyncio
import random
import uuid
import aiohttp
import structlog
from typing import Any, Callable, Dict, Optional
from structlog.contextvars import bound_contextvars

from chatops_relay.config import Settings
from chatops_relay.exceptions import ChatTransportError, RateLimitError

# Client errors that a retry cannot fix.
_NON_RETRYABLE_STATUSES = frozenset({400, 401, 403, 404, 413})


class AsyncHttpClient:
    """Async JSON HTTP client for the Mattermost REST API with retries and 429 handling.

    Injects Settings and optionally an aiohttp.ClientSession. If no session
    is provided, one is created and must be closed via aclose() or used
    as an async context manager. Requests carry the bearer token from
    settings.mattermost.token when set.
    """

    def __init__(
        self,
        settings: Settings,
        *,
        session: Optional[aiohttp.ClientSession] = None,
        get_logger: Callable[[str], Any] = structlog.get_logger,
        logger_name: Optional[str] = None,
    ) -> None:
        """Initialize the client.

        Args:
            settings: Configuration (timeout, max_retries, token).
            session: Optional shared aiohttp session. If None, the client
                creates and owns a session (call aclose() when done).
            get_logger: Logger factory (injected) with default of structlog.get_logger.
            logger_name: Optional logger name (defaults to class name).
        """
        self._settings = settings
        self._session = session
        self._owns_session = session is None
        self._logger = get_logger(logger_name or self.__class__.__name__)

    def _headers(self) -> Dict[str, str]:
        headers = {"Accept": "application/json"}
        token = self._settings.mattermost.token
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    async def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            timeout = aiohttp.ClientTimeout(total=self._settings.mattermost.timeout_seconds)
            self._session = aiohttp.ClientSession(timeout=timeout, headers=self._headers())
        return self._session

    async def aclose(self) -> None:
        """Close the session if this client owns it."""
        if self._owns_session and self._session is not None and not self._session.closed:
            await self._session.close()
            self._session = None

    async def __aenter__(self) -> AsyncHttpClient:
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.aclose()

    def _backoff_delay(self, attempt: int) -> float:
        """Exponential backoff with jitter, capped at 4 seconds."""
        base = min(4.0, 0.25 * (2**attempt))
        return base + random.uniform(0.0, 0.15)

    @staticmethod
    def _retry_after(response: aiohttp.ClientResponse) -> Optional[float]:
        header = response.headers.get("Retry-After")
        if not header:
            return None
        try:
            return float(header)
        except ValueError:
            return None

    async def get(self, url: str, *, params: Optional[Dict[str, Any]] = None) -> Any:
        """Perform a GET request and return JSON. Retries on failure and on 429."""
        return await self.request("GET", url, params=params)

    async def post(self, url: str, *, json: Optional[Any] = None) -> Any:
        """Perform a POST request with a JSON body and return JSON. Retries on failure and on 429."""
        return await self.request("POST", url, json=json)

    async def request(
        self,
        method: str,
        url: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        json: Optional[Any] = None,
    ) -> Any:
        """Perform a request and return parsed JSON.

        Args:
            method: HTTP method.
            url: Full URL to request.
            params: Optional query parameters.
            json: Optional JSON-serializable body.

        Returns:
            Parsed JSON response (dict or list).

        Raises:
            RateLimitError: If 429 is returned and retries are exhausted.
            ChatTransportError: If the request fails after all retries, or
                immediately on a client error that retrying cannot fix.
        """
        request_id = uuid.uuid4().hex[:12]
        max_retries = self._settings.mattermost.max_retries
        event_prefix = f"http_{method.lower()}"
        last_error: Optional[Exception] = None
        last_retry_after: Optional[float] = None
        rate_limited = False

        with bound_contextvars(
            http_method=method,
            http_url=url,
            http_request_id=request_id,
            http_max_retries=max_retries,
        ):
            for attempt in range(max_retries):
                with bound_contextvars(http_attempt=attempt + 1):
                    try:
                        session = await self._get_session()
                        async with session.request(
                            method, url, params=params, json=json
                        ) as response:
                            if response.status == 429:
                                rate_limited = True
                                last_retry_after = self._retry_after(response)
                                self._logger.warning(
                                    f"{event_prefix}_rate_limited",
                                    http_status_code=429,
                                    http_retry_after_seconds=last_retry_after,
                                )
                                if last_retry_after is not None and last_retry_after > 0:
                                    await asyncio.sleep(last_retry_after)
                                else:
                                    await asyncio.sleep(self._backoff_delay(attempt))
                                continue

                            rate_limited = False
                            response.raise_for_status()
                            return await response.json(content_type=None)
                    except aiohttp.ClientResponseError as e:
                        last_error = e
                        if e.status in _NON_RETRYABLE_STATUSES:
                            self._logger.warning(
                                f"{event_prefix}_rejected",
                                http_status_code=e.status,
                                error_message=e.message,
                            )
                            raise ChatTransportError(
                                f"{method} rejected with {e.status}: {url}",
                                url=url,
                                status_code=e.status,
                                cause=e,
                            ) from e
                        self._logger.debug(
                            f"{event_prefix}_retry",
                            error_type=type(e).__name__,
                            error_message=str(e),
                            http_status_code=e.status,
                        )
                        await asyncio.sleep(self._backoff_delay(attempt))
                    except (aiohttp.ClientError, asyncio.TimeoutError) as e:
                        last_error = e
                        self._logger.debug(
                            f"{event_prefix}_retry",
                            error_type=type(e).__name__,
                            error_message=str(e),
                        )
                        await asyncio.sleep(self._backoff_delay(attempt))

            if rate_limited:
                self._logger.error(
                    f"{event_prefix}_rate_limit_exhausted",
                    http_attempts=max_retries,
                )
                raise RateLimitError(url=url, retry_after=last_retry_after)

            status_code = (
                last_error.status
                if isinstance(last_error, aiohttp.ClientResponseError)
                else None
            )
            self._logger.error(
                f"{event_prefix}_failed",
                http_status_code=status_code,
                http_attempts=max_retries,
                error_type=type(last_error).__name__ if last_error else None,
                error_message=str(last_error) if last_error else None,
            )
            raise ChatTransportError(
                f"{method} failed after {max_retries} retries: {url}",
                url=url,
                status_code=status_code,
                cause=last_error,
            ) from last_error
