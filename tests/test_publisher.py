"""Tests for the detached realtime/push hand-off."""

from __future__ import annotations

import asyncio
import threading

from clario.domain.entities import RawEvent
from clario.infrastructure.notifications import (
    REALTIME_EVENT_TYPE,
    RawEventPublisher,
    run_detached,
    serialize_raw_event,
)

from .conftest import at


def _event() -> RawEvent:
    return RawEvent(
        id="e1", recipient_id="R", actor_id="A", event_type="like", post_id="P1", created_at=at(1)
    )


class FakeManager:
    def __init__(self) -> None:
        self.sent = []

    async def send_to_user(self, user_id, message):
        self.sent.append((user_id, message))


class FakeDispatcher:
    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.dispatched = []

    async def dispatch(self, recipient_id, event):
        self.dispatched.append((recipient_id, event.id))
        if self.fail:
            raise RuntimeError("push service down")


async def _settle() -> None:
    for _ in range(5):
        await asyncio.sleep(0)


def test_publisher_schedules_realtime_and_push_without_waiting():
    manager = FakeManager()
    dispatcher = FakeDispatcher(fail=True)
    publisher = RawEventPublisher(manager, lambda: dispatcher)

    async def scenario():
        publisher.dispatch(_event())
        assert manager.sent == []
        await _settle()

    asyncio.run(scenario())

    (user_id, message), = manager.sent
    assert user_id == "R"
    assert message["type"] == REALTIME_EVENT_TYPE
    assert message["data"]["post_id"] == "P1"
    assert dispatcher.dispatched == [("R", "e1")]


def test_run_detached_without_event_loop_uses_worker_thread():
    done = threading.Event()

    async def work():
        done.set()

    run_detached(work)

    assert done.wait(timeout=5)


def test_serialize_raw_event():
    payload = serialize_raw_event(_event())

    assert payload == {
        "id": "e1",
        "user_id": "R",
        "actor_id": "A",
        "type": "like",
        "post_id": "P1",
        "comment_id": None,
        "read_at": None,
        "created_at": at(1).isoformat(),
    }
