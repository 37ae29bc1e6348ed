"""
Tests for the change notifier.

Validates:
1. Events reach every subscriber except the originating client
2. A full queue drops its oldest event instead of blocking
3. SSE wire format
"""

from __future__ import annotations

import json

from cookiejar.services.notifier import (
    COOKIE_DELETED,
    DATA_CHANGED,
    REFRESH_JAR,
    ChangeEvent,
    ChangeNotifier,
)


async def test_origin_is_excluded(notifier):
    async with notifier.subscription("overlay") as overlay, \
            notifier.subscription("dashboard") as dashboard:
        delivered = notifier.publish(DATA_CHANGED, origin="dashboard")

        assert delivered == 1
        assert overlay.get_nowait().kind == DATA_CHANGED
        assert dashboard.empty()


async def test_anonymous_publish_reaches_everyone(notifier):
    async with notifier.subscription("overlay") as overlay, notifier.subscription() as anon:
        assert notifier.publish(REFRESH_JAR) == 2
        assert overlay.qsize() == anon.qsize() == 1


async def test_unsubscribe_on_exit(notifier):
    async with notifier.subscription("overlay"):
        assert notifier.subscriber_count == 1
    assert notifier.subscriber_count == 0
    assert notifier.publish(DATA_CHANGED) == 0


async def test_full_queue_drops_oldest():
    notifier = ChangeNotifier(queue_size=2)
    async with notifier.subscription() as queue:
        notifier.publish(DATA_CHANGED, {"n": 1})
        notifier.publish(DATA_CHANGED, {"n": 2})
        notifier.publish(DATA_CHANGED, {"n": 3})

        assert queue.qsize() == 2
        assert [queue.get_nowait().payload["n"] for _ in range(2)] == [2, 3]


def test_sse_format():
    event = ChangeEvent(kind=COOKIE_DELETED, payload={"id": "c1"})
    text = event.to_sse()

    assert text.startswith("event: cookie-deleted\ndata: ")
    assert text.endswith("\n\n")
    assert json.loads(text.split("data: ", 1)[1]) == {"id": "c1"}
    assert ChangeEvent(kind=DATA_CHANGED).to_sse() == "event: data-changed\ndata: {}\n\n"
