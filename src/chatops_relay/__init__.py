"""ChatOps relay: render notifications into paced chat messages."""

from chatops_relay.adapters import ChatAdapter, MattermostAdapter
from chatops_relay.config import get_settings
from chatops_relay.delivery import MessageDispatcher
from chatops_relay.DI import Container
from chatops_relay.models import Envelope, NotificationRecord

__version__ = "0.1.0"
__all__ = [
    "ChatAdapter",
    "Container",
    "Envelope",
    "MattermostAdapter",
    "MessageDispatcher",
    "NotificationRecord",
    "get_settings",
]
