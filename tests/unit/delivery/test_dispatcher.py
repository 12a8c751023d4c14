# -*- coding: utf-8 -*-
"""Unit tests for MessageDispatcher rendering and paced delivery."""

from __future__ import annotations

import asyncio
import math
from collections.abc import Callable
from typing import Any
from unittest.mock import AsyncMock, Mock

import pytest

from chatops_relay.delivery.dispatcher import MessageDispatcher
from chatops_relay.models.notification import Envelope, NotificationRecord, SplitMessage

SUCCESS = "#00aa00"
FAIL = "#cc0000"


def _dispatcher(
    transport: Any,
    settings: Any,
    *,
    sleep: Callable[[float], Any] | None = None,
    **kwargs: Any,
) -> MessageDispatcher:
    """Build a Mattermost-flavoured dispatcher with injectable doubles."""
    return MessageDispatcher(
        transport,
        settings,
        platform="mattermost",
        sleep=sleep or AsyncMock(),
        **kwargs,
    )


async def test_short_channel_message_is_one_chunk_with_mention(
    transport: Any,
    settings: Any,
    record_factory: Callable[..., NotificationRecord],
) -> None:
    dispatcher = _dispatcher(transport, settings)

    await dispatcher.deliver(record_factory(message="hello", user="alice", channel="ops"))

    assert len(transport.sent) == 1
    envelope, message = transport.sent[0]
    assert envelope == Envelope(room="ops")
    assert message.message == "@alice: "
    assert message.attachments == [
        {
            "color": SUCCESS,
            "mrkdwn_in": ["text", "pretext"],
            "text": "hello",
            "fallback": "hello",
        }
    ]


async def test_pretext_is_joined_to_mention_on_first_chunk(
    transport: Any,
    settings: Any,
    record_factory: Callable[..., NotificationRecord],
) -> None:
    dispatcher = _dispatcher(transport, settings)

    await dispatcher.deliver(
        record_factory(message="Deploy finished{~}all 12 hosts updated", user="alice")
    )

    _, message = transport.sent[0]
    assert message.message == "@alice: Deploy finished"
    assert message.attachments[0]["text"] == "all 12 hosts updated"


async def test_whisper_goes_to_user_without_mention(
    transport: Any,
    settings: Any,
    record_factory: Callable[..., NotificationRecord],
) -> None:
    dispatcher = _dispatcher(transport, settings)

    await dispatcher.deliver(
        record_factory(message="secret{~}token rotated", user="alice", whisper=True)
    )

    envelope, message = transport.sent[0]
    assert envelope == Envelope(room="alice", direct=True)
    assert message.message == "secret"


async def test_failure_marker_colors_every_chunk(
    transport: Any,
    settings_factory: Callable[..., Any],
    record_factory: Callable[..., NotificationRecord],
) -> None:
    dispatcher = _dispatcher(transport, settings_factory(chunk_size=10))
    body = "execution failed\nstatus : failed\n..."

    await dispatcher.deliver(record_factory(message=body))

    colors = {m.attachments[0]["color"] for _, m in transport.sent}
    assert colors == {FAIL}


async def test_long_message_is_split_and_paced(
    transport: Any,
    settings: Any,
    timeline: list[tuple[str, Any]],
    fake_sleep: Callable[[float], Any],
    record_factory: Callable[..., NotificationRecord],
) -> None:
    body = "".join(chr(ord("a") + i % 26) for i in range(9000))
    dispatcher = _dispatcher(transport, settings, sleep=fake_sleep)

    await dispatcher.deliver(record_factory(message=body, user="alice"))

    assert [kind for kind, _ in timeline] == ["send", "sleep", "send", "sleep", "send"]
    assert [value for kind, value in timeline if kind == "sleep"] == [0.3, 0.3]

    messages = [m for _, m in transport.sent]
    assert [len(m.attachments[0]["text"]) for m in messages] == [3800, 3800, 1400]
    assert "".join(m.attachments[0]["text"] for m in messages) == body
    assert [m.message for m in messages] == ["@alice: ", None, None]


@pytest.mark.parametrize("length, size", [(1, 5), (5, 5), (6, 5), (11, 5), (9000, 3800)])
async def test_chunk_count_is_ceil_of_length_over_size(
    length: int,
    size: int,
    transport: Any,
    settings_factory: Callable[..., Any],
    record_factory: Callable[..., NotificationRecord],
) -> None:
    dispatcher = _dispatcher(transport, settings_factory(chunk_size=size))

    plan = dispatcher.render(record_factory(message="x" * length))

    assert len(plan.chunks) == math.ceil(length / size)


async def test_chunks_keep_routing_and_fallback_per_chunk(
    transport: Any,
    settings_factory: Callable[..., Any],
    record_factory: Callable[..., NotificationRecord],
) -> None:
    dispatcher = _dispatcher(transport, settings_factory(chunk_size=3))

    await dispatcher.deliver(record_factory(message="abcdefg", user="bob", whisper=True))

    assert [env for env, _ in transport.sent] == [Envelope(room="bob", direct=True)] * 3
    attachments = [m.attachments[0] for _, m in transport.sent]
    assert [a["text"] for a in attachments] == ["abc", "def", "g"]
    assert [a["fallback"] for a in attachments] == ["abc", "def", "g"]


async def test_only_first_chunk_carries_message_even_when_empty(
    transport: Any,
    settings_factory: Callable[..., Any],
    record_factory: Callable[..., NotificationRecord],
) -> None:
    dispatcher = _dispatcher(transport, settings_factory(chunk_size=2))

    await dispatcher.deliver(record_factory(message="abcdef"))

    assert [m.message for _, m in transport.sent] == ["", None, None]


async def test_overrides_merge_into_each_attachment(
    transport: Any,
    settings: Any,
    record_factory: Callable[..., NotificationRecord],
) -> None:
    dispatcher = _dispatcher(transport, settings)

    await dispatcher.deliver(
        record_factory(message="body", extra={"mattermost": {"title": "X"}})
    )

    attachment = transport.sent[0][1].attachments[0]
    assert attachment["title"] == "X"
    assert attachment["color"] == SUCCESS
    assert attachment["mrkdwn_in"] == ["text", "pretext"]


async def test_overrides_for_other_platforms_are_ignored(
    transport: Any,
    settings: Any,
    record_factory: Callable[..., NotificationRecord],
) -> None:
    dispatcher = _dispatcher(transport, settings)

    await dispatcher.deliver(record_factory(message="body", extra={"slack": {"title": "X"}}))

    assert "title" not in transport.sent[0][1].attachments[0]


async def test_custom_attachments_are_sent_verbatim(
    transport: Any,
    settings: Any,
    record_factory: Callable[..., NotificationRecord],
) -> None:
    custom = [
        {
            "author_name": "Jira Bot",
            "title": "OPS-1",
            "fields": [{"title": "Summary", "value": "Disk full", "short": False}],
        }
    ]
    dispatcher = _dispatcher(transport, settings)

    await dispatcher.deliver(
        record_factory(message="Ticket{~}body", extra={"mattermost": {"attachments": custom}})
    )

    _, message = transport.sent[0]
    assert message.attachments == custom
    assert message.message == "Ticket"


async def test_empty_body_sends_pretext_as_plain_text(
    transport: Any,
    settings: Any,
    record_factory: Callable[..., NotificationRecord],
) -> None:
    dispatcher = _dispatcher(transport, settings)

    await dispatcher.deliver(record_factory(message="Only a greeting{~}", user="alice"))

    assert transport.sent == []
    assert transport.texts == [("ops", "@alice: Only a greeting")]


async def test_empty_message_degenerates_to_plain_text(
    transport: Any,
    settings: Any,
    record_factory: Callable[..., NotificationRecord],
) -> None:
    dispatcher = _dispatcher(transport, settings)

    await dispatcher.deliver(record_factory(message="", user=None))

    assert transport.sent == []
    assert transport.texts == [("ops", "")]


async def test_record_is_not_mutated(
    transport: Any,
    settings_factory: Callable[..., Any],
    record_factory: Callable[..., NotificationRecord],
) -> None:
    overrides = {"title": "X", "fields": [{"title": "a", "value": "b"}]}
    extra = {"color": "#111111", "mattermost": overrides}
    record = record_factory(message="abcdef", user="alice", extra=extra)
    dispatcher = _dispatcher(transport, settings_factory(chunk_size=2))

    await dispatcher.deliver(record)

    assert record.message == "abcdef"
    assert dict(record.extra or {}) == {"color": "#111111", "mattermost": overrides}
    assert overrides == {"title": "X", "fields": [{"title": "a", "value": "b"}]}
    assert "text" not in overrides


async def test_uses_injected_formatter_and_splitter(
    transport: Any,
    settings: Any,
    record_factory: Callable[..., NotificationRecord],
) -> None:
    formatter = Mock(format=Mock(return_value="FORMATTED"))
    splitter = Mock(split=Mock(return_value=SplitMessage(pretext="pre", text=["one", "two"])))
    dispatcher = _dispatcher(transport, settings, formatter=formatter, splitter=splitter)

    await dispatcher.deliver(record_factory(message="raw"))

    formatter.format.assert_called_once_with("raw")
    splitter.split.assert_called_once_with("FORMATTED")
    assert [m.attachments[0]["text"] for _, m in transport.sent] == ["one", "two"]
    assert transport.sent[0][1].message == "pre"


async def test_transport_errors_propagate_without_retry(
    settings: Any,
    record_factory: Callable[..., NotificationRecord],
) -> None:
    transport = Mock(send=AsyncMock(side_effect=RuntimeError("boom")))
    dispatcher = _dispatcher(transport, settings)

    with pytest.raises(RuntimeError, match="boom"):
        await dispatcher.deliver(record_factory(message="abc"))

    assert transport.send.await_count == 1


async def test_dispatch_returns_before_sending_and_drain_completes(
    transport: Any,
    settings: Any,
    record_factory: Callable[..., NotificationRecord],
) -> None:
    dispatcher = _dispatcher(transport, settings)

    dispatcher.dispatch(record_factory(message="first"))
    dispatcher.dispatch(record_factory(message="second"))
    assert transport.sent == []
    assert dispatcher.pending_count == 2

    await dispatcher.drain()

    assert dispatcher.pending_count == 0
    assert sorted(m.attachments[0]["text"] for _, m in transport.sent) == ["first", "second"]


async def test_concurrent_dispatches_keep_their_own_order(
    transport: Any,
    settings_factory: Callable[..., Any],
    record_factory: Callable[..., NotificationRecord],
) -> None:
    async def _yield(_: float) -> None:
        await asyncio.sleep(0)

    dispatcher = _dispatcher(transport, settings_factory(chunk_size=1), sleep=_yield)

    dispatcher.dispatch(record_factory(message="abc", channel="one"))
    dispatcher.dispatch(record_factory(message="xyz", channel="two"))
    await dispatcher.drain()

    by_room: dict[str, list[str]] = {}
    for envelope, message in transport.sent:
        by_room.setdefault(envelope.room, []).append(message.attachments[0]["text"])
    assert by_room == {"one": ["a", "b", "c"], "two": ["x", "y", "z"]}


async def test_failed_dispatch_is_logged(
    settings: Any,
    record_factory: Callable[..., NotificationRecord],
) -> None:
    logger = Mock()
    transport = Mock(send=AsyncMock(side_effect=RuntimeError("down")))
    dispatcher = _dispatcher(transport, settings, get_logger=Mock(return_value=logger))

    dispatcher.dispatch(record_factory(message="abc"))
    await dispatcher.drain()

    logger.error.assert_called_once()
    assert logger.error.call_args.args[0] == "dispatch_delivery_failed"
    assert logger.error.call_args.kwargs["error_message"] == "down"


async def test_drain_with_timeout_leaves_slow_deliveries_running(
    transport: Any,
    settings: Any,
    record_factory: Callable[..., NotificationRecord],
) -> None:
    release = asyncio.Event()

    async def _slow_send(*_: Any) -> None:
        await release.wait()

    transport.send = _slow_send
    dispatcher = _dispatcher(transport, settings)
    dispatcher.dispatch(record_factory(message="abc"))

    assert await dispatcher.drain(timeout=0.01) is False
    assert dispatcher.pending_count == 1

    release.set()
    assert await dispatcher.drain(timeout=1.0) is True
    assert dispatcher.pending_count == 0


async def test_cancel_pending_stops_in_flight_deliveries(
    transport: Any,
    settings: Any,
    record_factory: Callable[..., NotificationRecord],
) -> None:
    logger = Mock()

    async def _stuck_send(*_: Any) -> None:
        await asyncio.Event().wait()

    transport.send = _stuck_send
    dispatcher = _dispatcher(transport, settings, get_logger=Mock(return_value=logger))
    dispatcher.dispatch(record_factory(message="one"))
    dispatcher.dispatch(record_factory(message="two"))
    await asyncio.sleep(0)

    assert dispatcher.cancel_pending() == 2
    await dispatcher.drain()

    assert dispatcher.pending_count == 0
    assert [c.args[0] for c in logger.warning.call_args_list] == ["dispatch_delivery_cancelled"] * 2
