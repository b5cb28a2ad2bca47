"""Use cases for the read state of raw notification events."""

from __future__ import annotations

from collections.abc import Iterable

from sqlalchemy.orm import Session

from clario.infrastructure.repositories import RawEventRepository


def mark_read(
    session: Session, recipient_id: str, event_ids: Iterable[str] | None = None
) -> int:
    """Mark events of ``recipient_id`` as read and return how many changed.

    ``event_ids=None`` marks every unread event. Ids owned by another recipient
    and events that are already read are left untouched.
    """

    ids = None if event_ids is None else list(dict.fromkeys(event_ids))
    return RawEventRepository(session).mark_read(recipient_id, ids)


def get_unread_count(session: Session, recipient_id: str) -> int:
    """Return the true number of unread events, independent of the feed window."""

    return RawEventRepository(session).count_unread(recipient_id)


__all__ = ["mark_read", "get_unread_count"]
