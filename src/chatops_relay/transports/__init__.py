"""Chat transports."""

from chatops_relay.transports.base import BaseTransport
from chatops_relay.transports.console import ConsoleTransport
from chatops_relay.transports.mattermost import MattermostTransport

__all__ = [
    "BaseTransport",
    "ConsoleTransport",
    "MattermostTransport",
]
