"""Connection management helpers for notification websockets."""

from __future__ import annotations

import copy
import inspect
import logging
from collections import defaultdict
from typing import Any, Awaitable, Callable, DefaultDict, List, Set

from fastapi import WebSocket

logger = logging.getLogger(__name__)

Subscriber = Callable[[dict[str, Any]], Awaitable[None] | None]


class NotificationConnectionManager:
    """Route realtime messages to the websockets and in-process subscribers of a user."""

    def __init__(self) -> None:
        self._connections: DefaultDict[str, Set[WebSocket]] = defaultdict(set)
        self._subscribers: DefaultDict[str, List[Subscriber]] = defaultdict(list)

    async def connect(self, user_id: str, websocket: WebSocket) -> None:
        """Accept the websocket connection and register it for ``user_id``."""

        await websocket.accept()
        self._connections[user_id].add(websocket)

    def disconnect(self, user_id: str, websocket: WebSocket) -> None:
        """Remove ``websocket`` from the pool for ``user_id``."""

        connections = self._connections.get(user_id)
        if connections is None:
            return
        connections.discard(websocket)
        if not connections:
            self._connections.pop(user_id, None)

    def subscribe(self, user_id: str, handler: Subscriber) -> Callable[[], None]:
        """Register ``handler`` for messages sent to ``user_id``.

        Returns a callable that removes the subscription; calling it more than
        once is harmless.
        """

        self._subscribers[user_id].append(handler)

        def unsubscribe() -> None:
            handlers = self._subscribers.get(user_id)
            if not handlers or handler not in handlers:
                return
            handlers.remove(handler)
            if not handlers:
                self._subscribers.pop(user_id, None)

        return unsubscribe

    def subscriber_count(self, user_id: str) -> int:
        return len(self._subscribers.get(user_id, ()))

    async def send_to_user(self, user_id: str, message: dict[str, Any]) -> None:
        """Send ``message`` to every active connection and subscriber for ``user_id``."""

        for connection in list(self._connections.get(user_id, set())):
            try:
                await connection.send_json(message)
            except Exception:  # pragma: no cover - closed sockets are dropped
                self.disconnect(user_id, connection)

        for handler in list(self._subscribers.get(user_id, ())):
            try:
                result = handler(copy.deepcopy(message))
                if inspect.isawaitable(result):
                    await result
            except Exception:
                logger.warning(
                    "Realtime subscriber for user %s failed", user_id, exc_info=True
                )


notification_manager = NotificationConnectionManager()


__all__ = ["NotificationConnectionManager", "Subscriber", "notification_manager"]
