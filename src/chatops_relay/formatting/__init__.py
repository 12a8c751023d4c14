"""Text formatting and splitting collaborators of the dispatcher."""

from chatops_relay.formatting.splitter import (
    DEFAULT_CHUNK_SIZE,
    ChunkSplitter,
    MessageSplitter,
    chunk_text,
)
from chatops_relay.formatting.text_formatter import SlackLikeFormatter, TextFormatter

__all__ = [
    "DEFAULT_CHUNK_SIZE",
    "ChunkSplitter",
    "MessageSplitter",
    "SlackLikeFormatter",
    "TextFormatter",
    "chunk_text",
]
