# -*- coding: utf-8 -*-
"""Split formatted text into a pretext and size-bounded body chunks."""

from __future__ import annotations

from typing import Protocol

from chatops_relay.models.notification import SplitMessage

DEFAULT_CHUNK_SIZE = 3800
DEFAULT_PRETEXT_SEPARATOR = "{~}"


class ChunkSplitter(Protocol):
    """Split a string into a pretext and ordered chunks of bounded length."""

    def split(self, text: str) -> SplitMessage:
        ...


def chunk_text(text: str, size: int) -> list[str]:
    """Cut `text` into consecutive pieces of at most `size` characters.

    Joining the result reproduces `text`. An empty string gives no chunks.
    """
    if size <= 0:
        raise ValueError("size must be positive")
    return [text[i : i + size] for i in range(0, len(text), size)]


class MessageSplitter:
    """Pull the pretext out of a message and chunk the remaining body.

    Text before the first separator (`{~}` by default) is the pretext; the
    rest is the body. Without a separator the whole text is body.
    """

    def __init__(
        self,
        *,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        separator: str = DEFAULT_PRETEXT_SEPARATOR,
    ) -> None:
        if chunk_size <= 0:
            raise ValueError("chunk_size must be positive")
        if not separator:
            raise ValueError("separator must be non-empty")
        self.chunk_size = chunk_size
        self.separator = separator

    def split(self, text: str) -> SplitMessage:
        pretext, found, body = text.partition(self.separator)
        if not found:
            pretext, body = "", text
        chunks = chunk_text(body, self.chunk_size)
        return SplitMessage(pretext=pretext, text=chunks or None)
