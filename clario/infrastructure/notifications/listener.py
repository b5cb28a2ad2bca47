"""Realtime listener that keeps a recipient's unread badge and toast current.

The listener subscribes to the change stream of newly inserted raw events for
one recipient. Every insert bumps the local unread counter, resolves the
actor's display identity, fans out to the registered callbacks and replaces
the transient toast. An independent poll of the unread count keeps running
while the listener is active, so a broken stream degrades to polling.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Protocol

import anyio
from sqlalchemy.orm import Session

from clario.domain.entities import NOTIFICATION_TYPE_FOLLOW, ActorIdentity
from clario.domain.notification_text import UNKNOWN_ACTOR_NAME, format_notification_title
from clario.infrastructure.database import SessionLocal
from clario.infrastructure.repositories import RawEventRepository, UserRepository

from .manager import NotificationConnectionManager, notification_manager
from .publisher import REALTIME_EVENT_TYPE

logger = logging.getLogger(__name__)

TOAST_DURATION_SECONDS = 5.0
UNREAD_POLL_INTERVAL_SECONDS = 15.0


class ChangeStream(Protocol):
    def subscribe(
        self, user_id: str, handler: Callable[[dict[str, Any]], Any]
    ) -> Callable[[], None]:
        ...


@dataclass(frozen=True)
class LiveNotification:
    """A raw event received over the change stream with its resolved actor."""

    id: str
    recipient_id: str
    actor: ActorIdentity
    event_type: str
    post_id: str | None
    comment_id: str | None
    created_at: str | None


@dataclass(frozen=True)
class Toast:
    message: str
    link: str | None
    notification: LiveNotification


def build_toast(notification: LiveNotification) -> Toast:
    """Return the toast shown when ``notification`` arrives."""

    username = notification.actor.username
    message = format_notification_title(
        notification.event_type, f"@{username or UNKNOWN_ACTOR_NAME}"
    )
    link: str | None = None
    if notification.post_id:
        link = f"/post/{notification.post_id}"
    elif notification.event_type == NOTIFICATION_TYPE_FOLLOW and username:
        link = f"/profile/{username}"
    return Toast(message=message, link=link, notification=notification)


class NotificationListener:
    """Subscribe to new raw events of ``recipient_id`` for the lifetime of a session.

    Use it as an async context manager, or pair :meth:`start` with
    :meth:`close`. ``close`` is synchronous and leaves no subscription, timer
    or task behind.
    """

    def __init__(
        self,
        recipient_id: str,
        *,
        stream: ChangeStream,
        resolve_actor: Callable[[str], Awaitable[ActorIdentity | None]],
        fetch_unread_count: Callable[[], Awaitable[int]],
        poll_interval: float = UNREAD_POLL_INTERVAL_SECONDS,
        toast_duration: float = TOAST_DURATION_SECONDS,
    ) -> None:
        self.recipient_id = recipient_id
        self._stream = stream
        self._resolve_actor = resolve_actor
        self._fetch_unread_count = fetch_unread_count
        self._poll_interval = poll_interval
        self._toast_duration = toast_duration

        self._loop: asyncio.AbstractEventLoop | None = None
        self._unsubscribe: Callable[[], None] | None = None
        self._poll_task: asyncio.Task[None] | None = None
        self._pending: set[asyncio.Task[None]] = set()
        self._callbacks: list[Callable[[LiveNotification], None]] = []
        self._unread_count: int | None = None
        self._toast: Toast | None = None
        self._toast_handle: asyncio.TimerHandle | None = None

    @property
    def active(self) -> bool:
        return self._unsubscribe is not None

    @property
    def unread_count(self) -> int | None:
        return self._unread_count

    @property
    def toast(self) -> Toast | None:
        return self._toast

    def on_new_notification(
        self, callback: Callable[[LiveNotification], None]
    ) -> Callable[[], None]:
        """Register ``callback`` for new notifications; returns its remover."""

        self._callbacks.append(callback)

        def remove() -> None:
            if callback in self._callbacks:
                self._callbacks.remove(callback)

        return remove

    async def start(self) -> None:
        if self.active:
            return
        self._loop = asyncio.get_running_loop()
        self._unsubscribe = self._stream.subscribe(self.recipient_id, self._on_message)
        self._poll_task = self._loop.create_task(self._poll_unread_count())
        await self.refresh_unread_count()

    def close(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        if self._toast_handle is not None:
            self._toast_handle.cancel()
            self._toast_handle = None
        self._toast = None
        if self._poll_task is not None:
            self._poll_task.cancel()
            self._poll_task = None
        for task in list(self._pending):
            task.cancel()
        self._pending.clear()

    async def __aenter__(self) -> "NotificationListener":
        await self.start()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        self.close()

    async def refresh_unread_count(self) -> int | None:
        """Replace the local counter with the store's unread total."""

        try:
            count = await self._fetch_unread_count()
        except Exception:
            logger.warning(
                "Could not refresh unread count for user %s", self.recipient_id, exc_info=True
            )
            return self._unread_count
        self._unread_count = count
        return count

    async def wait_idle(self) -> None:
        """Wait until every received notification has been handled."""

        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    def _on_message(self, message: dict[str, Any]) -> None:
        if message.get("type") != REALTIME_EVENT_TYPE:
            return
        data = message.get("data")
        if not isinstance(data, dict) or data.get("user_id") != self.recipient_id:
            return
        loop = self._loop
        if loop is None or not self.active:
            return

        try:
            running = asyncio.get_running_loop()
        except RuntimeError:
            running = None
        if running is loop:
            self._spawn(data)
        else:
            loop.call_soon_threadsafe(self._spawn, data)

    def _spawn(self, data: dict[str, Any]) -> None:
        if self._loop is None or not self.active:
            return
        task = self._loop.create_task(self._handle_insert(data))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def _handle_insert(self, data: dict[str, Any]) -> None:
        self._unread_count = (self._unread_count or 0) + 1

        actor_id = str(data.get("actor_id") or "")
        notification = LiveNotification(
            id=str(data.get("id")),
            recipient_id=self.recipient_id,
            actor=await self._resolve(actor_id),
            event_type=str(data.get("type")),
            post_id=data.get("post_id"),
            comment_id=data.get("comment_id"),
            created_at=data.get("created_at"),
        )
        if not self.active:
            return

        for callback in list(self._callbacks):
            try:
                callback(notification)
            except Exception:
                logger.warning("Notification callback failed", exc_info=True)
        self._show_toast(notification)

    async def _resolve(self, actor_id: str) -> ActorIdentity:
        try:
            identity = await self._resolve_actor(actor_id)
        except Exception:
            logger.warning("Could not resolve actor %s", actor_id, exc_info=True)
            identity = None
        return identity or ActorIdentity(id=actor_id)

    def _show_toast(self, notification: LiveNotification) -> None:
        if self._loop is None:
            return
        if self._toast_handle is not None:
            self._toast_handle.cancel()
        self._toast = build_toast(notification)
        self._toast_handle = self._loop.call_later(self._toast_duration, self._expire_toast)

    def _expire_toast(self) -> None:
        self._toast = None
        self._toast_handle = None

    async def _poll_unread_count(self) -> None:
        while True:
            await asyncio.sleep(self._poll_interval)
            await self.refresh_unread_count()


def create_local_listener(
    recipient_id: str,
    *,
    manager: NotificationConnectionManager = notification_manager,
    session_factory: Callable[[], Session] = SessionLocal,
    **options: Any,
) -> NotificationListener:
    """Return a listener wired to the in-process manager and the database."""

    def load_actor(actor_id: str) -> ActorIdentity | None:
        session = session_factory()
        try:
            user = UserRepository(session).get(actor_id)
        finally:
            session.close()
        if user is None:
            return None
        return ActorIdentity(id=user.id, username=user.username, avatar_url=user.avatar_url)

    def count_unread() -> int:
        session = session_factory()
        try:
            return RawEventRepository(session).count_unread(recipient_id)
        finally:
            session.close()

    async def resolve_actor(actor_id: str) -> ActorIdentity | None:
        return await anyio.to_thread.run_sync(load_actor, actor_id)

    async def fetch_unread_count() -> int:
        return await anyio.to_thread.run_sync(count_unread)

    return NotificationListener(
        recipient_id,
        stream=manager,
        resolve_actor=resolve_actor,
        fetch_unread_count=fetch_unread_count,
        **options,
    )


__all__ = [
    "ChangeStream",
    "LiveNotification",
    "NotificationListener",
    "TOAST_DURATION_SECONDS",
    "Toast",
    "UNREAD_POLL_INTERVAL_SECONDS",
    "build_toast",
    "create_local_listener",
]
