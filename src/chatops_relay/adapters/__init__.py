"""Chat adapters."""

from chatops_relay.adapters.base import ChatAdapter
from chatops_relay.adapters.mattermost import MattermostAdapter

__all__ = [
    "ChatAdapter",
    "MattermostAdapter",
]
