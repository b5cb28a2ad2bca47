"""Best-effort fan-out of a raw event to every push endpoint of its recipient."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping, Sequence
from functools import lru_cache
from typing import Callable

import anyio
from sqlalchemy.orm import Session

from clario.config import Settings, get_settings
from clario.domain.entities import PushSubscription, RawEvent, User
from clario.domain.notification_text import (
    format_notification_title,
    notification_target_path,
)
from clario.infrastructure.database import SessionLocal
from clario.infrastructure.repositories import PushSubscriptionRepository, UserRepository

from .transports import ExpoPushTransport, PushMessage, PushTransport, WebPushTransport

logger = logging.getLogger(__name__)


class PushDispatcher:
    """Deliver one event to all registered endpoints of a recipient.

    Endpoint kinds without a configured transport are skipped. Dead endpoints
    are not pruned; they fail (and are logged) on every attempt.
    """

    def __init__(
        self,
        *,
        session_factory: Callable[[], Session],
        transports: Mapping[str, PushTransport],
        base_url: str,
    ) -> None:
        self._session_factory = session_factory
        self._transports = dict(transports)
        self._base_url = base_url.rstrip("/")

    async def dispatch(self, recipient_id: str, event: RawEvent) -> None:
        """Send ``event`` to every endpoint of ``recipient_id``; never raises."""

        if not self._transports:
            return
        try:
            await self._dispatch(recipient_id, event)
        except Exception:
            logger.exception(
                "Push dispatch of %s notification to user %s failed",
                event.event_type,
                recipient_id,
            )

    async def _dispatch(self, recipient_id: str, event: RawEvent) -> None:
        subscriptions, actor = await anyio.to_thread.run_sync(
            self._load_context, recipient_id, event.actor_id
        )
        deliverable = [sub for sub in subscriptions if sub.kind in self._transports]
        if not deliverable:
            return

        message = self.build_message(event, actor)
        outcomes = await asyncio.gather(
            *(self._transports[sub.kind].send(sub, message) for sub in deliverable),
            return_exceptions=True,
        )
        for subscription, outcome in zip(deliverable, outcomes):
            if isinstance(outcome, BaseException):
                logger.warning(
                    "Push delivery to %s endpoint %s for user %s failed: %s",
                    subscription.kind,
                    subscription.id,
                    recipient_id,
                    outcome,
                )

    def build_message(self, event: RawEvent, actor: User | None) -> PushMessage:
        username = actor.username if actor else None
        path = notification_target_path(event.post_id, username)
        return PushMessage(
            title=format_notification_title(event.event_type, username),
            url=f"{self._base_url}{path}",
            event_type=event.event_type,
            post_id=event.post_id,
        )

    def _load_context(
        self, recipient_id: str, actor_id: str
    ) -> tuple[Sequence[PushSubscription], User | None]:
        session = self._session_factory()
        try:
            subscriptions = PushSubscriptionRepository(session).list_for_user(recipient_id)
            if not subscriptions:
                return [], None
            return subscriptions, UserRepository(session).get(actor_id)
        finally:
            session.close()


def build_push_transports(settings: Settings) -> dict[str, PushTransport]:
    """Return the transports whose credentials are configured."""

    transports: dict[str, PushTransport] = {}
    if settings.web_push_configured:
        transports[WebPushTransport.kind] = WebPushTransport(
            vapid_private_key=settings.vapid_private_key or "",
            vapid_subject=settings.vapid_subject,
            ttl=settings.web_push_ttl_seconds,
            timeout=settings.push_timeout_seconds,
        )
    if settings.expo_push_enabled:
        transports[ExpoPushTransport.kind] = ExpoPushTransport(
            url=settings.expo_push_url,
            timeout=settings.push_timeout_seconds,
            access_token=settings.expo_access_token,
        )
    return transports


@lru_cache
def get_push_dispatcher() -> PushDispatcher:
    """Return the shared dispatcher built from the application settings."""

    settings = get_settings()
    return PushDispatcher(
        session_factory=SessionLocal,
        transports=build_push_transports(settings),
        base_url=settings.public_base_url,
    )


__all__ = ["PushDispatcher", "build_push_transports", "get_push_dispatcher"]
