"""HTTP and API clients."""

from chatops_relay.clients.http import AsyncHttpClient
from chatops_relay.clients.mattermost_api import MattermostApiClient

__all__ = [
    "AsyncHttpClient",
    "MattermostApiClient",
]
