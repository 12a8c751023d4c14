# -*- coding: utf-8 -*-
"""Text formatters: raw notification text -> platform markup."""

from __future__ import annotations

from typing import Protocol


class TextFormatter(Protocol):
    """Convert raw notification text into the markup a chat backend renders."""

    def format(self, raw: str | None) -> str:
        """Return platform markup for `raw`. Must not fail for string input."""
        ...


class SlackLikeFormatter:
    """Formatter for Slack-style markdown backends (Slack, Mattermost).

    The text already is markdown and travels inside an attachment, so it is
    neither escaped nor truncated here; chunking happens later.
    """

    def format(self, raw: str | None) -> str:
        if raw is None:
            return ""
        return raw
