"""Fire-and-forget fan-out of freshly recorded raw events."""

from __future__ import annotations

import asyncio
import logging
import threading
from typing import Any, Awaitable, Callable

from anyio import from_thread

from clario.domain.entities import RawEvent

from .manager import NotificationConnectionManager, notification_manager
from .push import PushDispatcher, get_push_dispatcher

logger = logging.getLogger(__name__)

REALTIME_EVENT_TYPE = "notification.created"

_background_tasks: set[asyncio.Task[None]] = set()


def run_detached(func: Callable[..., Awaitable[Any]], *args: Any) -> None:
    """Schedule ``func(*args)`` without waiting for it.

    Failures inside the coroutine are logged and never reach the caller.
    """

    try:
        asyncio.get_running_loop()
    except RuntimeError:
        try:
            from_thread.run_sync(_spawn_task, func, args)
        except RuntimeError:
            # Not called from an AnyIO worker thread; use a private event loop.
            worker = threading.Thread(
                target=asyncio.run,
                args=(_guarded(func, args),),
                name="clario-notification-dispatch",
                daemon=True,
            )
            worker.start()
    else:
        _spawn_task(func, args)


def _spawn_task(func: Callable[..., Awaitable[Any]], args: tuple[Any, ...]) -> None:
    task = asyncio.get_running_loop().create_task(_guarded(func, args))
    _background_tasks.add(task)
    task.add_done_callback(_background_tasks.discard)


async def _guarded(func: Callable[..., Awaitable[Any]], args: tuple[Any, ...]) -> None:
    try:
        await func(*args)
    except Exception:
        logger.exception("Background notification task %r failed", func)


class RawEventPublisher:
    """Push new raw events to realtime listeners and to the push dispatcher."""

    def __init__(
        self,
        manager: NotificationConnectionManager,
        dispatcher_factory: Callable[[], PushDispatcher],
    ) -> None:
        self._manager = manager
        self._dispatcher_factory = dispatcher_factory

    def dispatch(self, event: RawEvent) -> None:
        """Schedule realtime and push delivery of ``event``."""

        message = {"type": REALTIME_EVENT_TYPE, "data": serialize_raw_event(event)}
        run_detached(self._manager.send_to_user, event.recipient_id, message)
        run_detached(self._dispatcher_factory().dispatch, event.recipient_id, event)


def serialize_raw_event(event: RawEvent) -> dict[str, Any]:
    """Return the realtime payload representation for ``event``."""

    return {
        "id": event.id,
        "user_id": event.recipient_id,
        "actor_id": event.actor_id,
        "type": event.event_type,
        "post_id": event.post_id,
        "comment_id": event.comment_id,
        "read_at": event.read_at.isoformat() if event.read_at else None,
        "created_at": event.created_at.isoformat() if event.created_at else None,
    }


raw_event_publisher = RawEventPublisher(notification_manager, get_push_dispatcher)


def dispatch_raw_event(event: RawEvent) -> None:
    """Public helper that delegates to the shared publisher instance."""

    raw_event_publisher.dispatch(event)


__all__ = [
    "REALTIME_EVENT_TYPE",
    "RawEventPublisher",
    "dispatch_raw_event",
    "raw_event_publisher",
    "run_detached",
    "serialize_raw_event",
]
