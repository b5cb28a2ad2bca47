"""Tests for the realtime notification listener."""

from __future__ import annotations

import asyncio

from clario.domain.entities import ActorIdentity
from clario.infrastructure.notifications import (
    REALTIME_EVENT_TYPE,
    NotificationConnectionManager,
    NotificationListener,
    create_local_listener,
)


def _message(event_id: str, *, actor: str = "A", event_type: str = "like", post: str | None = "P1",
             recipient: str = "R") -> dict:
    return {
        "type": REALTIME_EVENT_TYPE,
        "data": {
            "id": event_id,
            "user_id": recipient,
            "actor_id": actor,
            "type": event_type,
            "post_id": post,
            "comment_id": None,
            "read_at": None,
            "created_at": "2024-05-01T12:00:00+00:00",
        },
    }


class Backend:
    """Stand-in for the identity resolver and the unread-count endpoint."""

    def __init__(self, unread: int = 0) -> None:
        self.unread = unread
        self.count_calls = 0
        self.identities = {"A": ActorIdentity(id="A", username="alice"),
                           "B": ActorIdentity(id="B", username="bob")}

    async def resolve_actor(self, actor_id: str) -> ActorIdentity | None:
        if actor_id == "BROKEN":
            raise RuntimeError("identity service down")
        return self.identities.get(actor_id)

    async def fetch_unread_count(self) -> int:
        self.count_calls += 1
        return self.unread


def _listener(manager, backend, **options) -> NotificationListener:
    return NotificationListener(
        "R",
        stream=manager,
        resolve_actor=backend.resolve_actor,
        fetch_unread_count=backend.fetch_unread_count,
        **options,
    )


def test_new_event_updates_counter_listeners_and_toast():
    manager = NotificationConnectionManager()
    backend = Backend(unread=3)
    received = []

    async def scenario():
        async with _listener(manager, backend) as listener:
            listener.on_new_notification(received.append)
            assert listener.unread_count == 3

            await manager.send_to_user("R", _message("e1"))
            await listener.wait_idle()

            assert listener.unread_count == 4
            assert listener.toast.message == "@alice liked your post"
            assert listener.toast.link == "/post/P1"

    asyncio.run(scenario())

    (notification,) = received
    assert notification.id == "e1"
    assert notification.actor.username == "alice"


def test_toast_is_replaced_and_expires():
    manager = NotificationConnectionManager()
    backend = Backend()

    async def scenario():
        async with _listener(manager, backend, toast_duration=0.05) as listener:
            await manager.send_to_user("R", _message("e1"))
            await listener.wait_idle()
            await manager.send_to_user(
                "R", _message("e2", actor="B", event_type="follow", post=None)
            )
            await listener.wait_idle()

            assert listener.toast.message == "@bob started following you"
            assert listener.toast.link == "/profile/bob"

            await asyncio.sleep(0.1)
            assert listener.toast is None

    asyncio.run(scenario())


def test_unresolvable_actor_renders_as_someone():
    manager = NotificationConnectionManager()
    backend = Backend()
    received = []

    async def scenario():
        async with _listener(manager, backend) as listener:
            listener.on_new_notification(received.append)
            await manager.send_to_user("R", _message("e1", actor="BROKEN", event_type="comment"))
            await listener.wait_idle()
            assert listener.toast.message == "@Someone commented on your post"
            assert listener.unread_count == 1

    asyncio.run(scenario())

    assert received[0].actor == ActorIdentity(id="BROKEN")


def test_messages_for_other_recipients_or_types_are_ignored():
    manager = NotificationConnectionManager()
    backend = Backend()

    async def scenario():
        async with _listener(manager, backend) as listener:
            await manager.send_to_user("R", {"type": "pong"})
            await manager.send_to_user("R", _message("e1", recipient="OTHER"))
            await listener.wait_idle()
            assert listener.unread_count == 0
            assert listener.toast is None

    asyncio.run(scenario())


def test_close_releases_subscription_timer_and_poll():
    manager = NotificationConnectionManager()
    backend = Backend()

    async def scenario():
        listener = _listener(manager, backend, toast_duration=60)
        await listener.start()
        assert manager.subscriber_count("R") == 1

        await manager.send_to_user("R", _message("e1"))
        await listener.wait_idle()
        assert listener.toast is not None

        listener.close()

        assert manager.subscriber_count("R") == 0
        assert listener.active is False
        assert listener.toast is None
        assert listener._toast_handle is None
        assert listener._poll_task is None

        await manager.send_to_user("R", _message("e2"))
        await listener.wait_idle()
        assert listener.unread_count == 1

    asyncio.run(scenario())


def test_poll_keeps_counter_fresh_without_stream_events():
    manager = NotificationConnectionManager()
    backend = Backend(unread=1)

    async def scenario():
        async with _listener(manager, backend, poll_interval=0.01) as listener:
            backend.unread = 7
            await asyncio.sleep(0.05)
            assert listener.unread_count == 7
        calls_after_close = backend.count_calls
        await asyncio.sleep(0.05)
        assert backend.count_calls == calls_after_close

    asyncio.run(scenario())


def test_removed_callback_is_not_invoked():
    manager = NotificationConnectionManager()
    backend = Backend()
    received = []

    async def scenario():
        async with _listener(manager, backend) as listener:
            remove = listener.on_new_notification(received.append)
            remove()
            await manager.send_to_user("R", _message("e1"))
            await listener.wait_idle()

    asyncio.run(scenario())

    assert received == []


def test_local_listener_reads_identity_and_count_from_store(make_user, add_event):
    make_user("A", "alice")
    add_event("R", "A", "follow", minutes=1)
    manager = NotificationConnectionManager()

    async def scenario():
        async with create_local_listener("R", manager=manager) as listener:
            assert listener.unread_count == 1
            await manager.send_to_user("R", _message("e2", event_type="follow", post=None))
            await listener.wait_idle()
            assert listener.unread_count == 2
            assert listener.toast.message == "@alice started following you"

    asyncio.run(scenario())
