"""Record notification-worthy events and hand them to realtime and push delivery."""

from __future__ import annotations

import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from clario.domain.entities import (
    NOTIFICATION_TYPE_COMMENT,
    NOTIFICATION_TYPE_FOLLOW,
    NOTIFICATION_TYPE_LIKE,
    NOTIFICATION_TYPE_MENTION,
    NOTIFICATION_TYPES,
    RawEvent,
)
from clario.domain.exceptions import StoreError
from clario.infrastructure.notifications import dispatch_raw_event
from clario.infrastructure.repositories import RawEventRepository, store_errors
from clario.utils import now_utc

logger = logging.getLogger(__name__)


def record_event(
    session: Session,
    *,
    recipient_id: str,
    actor_id: str,
    event_type: str,
    post_id: str | None = None,
    comment_id: str | None = None,
) -> RawEvent | None:
    """Persist one raw event for ``recipient_id`` and schedule its delivery.

    Returns ``None`` without writing anything when the actor is the recipient.
    The row is inserted inside a savepoint on ``session`` and committed along
    with whatever the caller has staged. A failed insert only rolls back the
    savepoint; storage and scheduling failures are logged and absorbed so that
    the action which caused the event is never affected.
    """

    if recipient_id == actor_id:
        return None
    if event_type not in NOTIFICATION_TYPES:
        logger.warning("Ignoring notification with unknown type %r", event_type)
        return None

    event = RawEvent(
        id=None,
        recipient_id=recipient_id,
        actor_id=actor_id,
        event_type=event_type,
        post_id=post_id,
        comment_id=comment_id,
        read_at=None,
        created_at=now_utc(),
    )
    # Any changes the caller has staged are flushed before the savepoint and
    # survive a failed insert.
    try:
        with session.begin_nested():
            saved = RawEventRepository(session).add(event)
    except (StoreError, SQLAlchemyError):
        logger.exception(
            "Could not record %s notification for user %s", event_type, recipient_id
        )
        return None

    try:
        with store_errors(session, "commit notification"):
            session.commit()
    except StoreError:
        logger.exception("Could not commit notification for user %s", recipient_id)
        return None

    try:
        dispatch_raw_event(saved)
    except Exception:
        logger.exception("Could not schedule delivery of notification %s", saved.id)
    return saved


def notify_post_liked(
    session: Session, *, post_author_id: str, actor_id: str, post_id: str
) -> RawEvent | None:
    """Notify the author of ``post_id`` that ``actor_id`` liked it."""

    return record_event(
        session,
        recipient_id=post_author_id,
        actor_id=actor_id,
        event_type=NOTIFICATION_TYPE_LIKE,
        post_id=post_id,
    )


def notify_post_commented(
    session: Session,
    *,
    post_author_id: str,
    actor_id: str,
    post_id: str,
    comment_id: str,
) -> RawEvent | None:
    """Notify the author of ``post_id`` about a new comment."""

    return record_event(
        session,
        recipient_id=post_author_id,
        actor_id=actor_id,
        event_type=NOTIFICATION_TYPE_COMMENT,
        post_id=post_id,
        comment_id=comment_id,
    )


def notify_user_followed(
    session: Session, *, followed_id: str, follower_id: str
) -> RawEvent | None:
    return record_event(
        session,
        recipient_id=followed_id,
        actor_id=follower_id,
        event_type=NOTIFICATION_TYPE_FOLLOW,
    )


def notify_user_mentioned(
    session: Session,
    *,
    mentioned_id: str,
    actor_id: str,
    post_id: str | None = None,
    comment_id: str | None = None,
) -> RawEvent | None:
    return record_event(
        session,
        recipient_id=mentioned_id,
        actor_id=actor_id,
        event_type=NOTIFICATION_TYPE_MENTION,
        post_id=post_id,
        comment_id=comment_id,
    )


__all__ = [
    "record_event",
    "notify_post_liked",
    "notify_post_commented",
    "notify_user_followed",
    "notify_user_mentioned",
]
