"""Domain entity representing one persisted notification-worthy event."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

NOTIFICATION_TYPE_LIKE = "like"
NOTIFICATION_TYPE_COMMENT = "comment"
NOTIFICATION_TYPE_FOLLOW = "follow"
NOTIFICATION_TYPE_MENTION = "mention"

NOTIFICATION_TYPES: tuple[str, ...] = (
    NOTIFICATION_TYPE_LIKE,
    NOTIFICATION_TYPE_COMMENT,
    NOTIFICATION_TYPE_FOLLOW,
    NOTIFICATION_TYPE_MENTION,
)

# Types grouped per target post; every other type collapses into one group.
POST_GROUPED_TYPES: frozenset[str] = frozenset(
    {NOTIFICATION_TYPE_LIKE, NOTIFICATION_TYPE_COMMENT}
)


@dataclass
class RawEvent:
    """A single like/comment/follow/mention addressed to ``recipient_id``."""

    id: str | None
    recipient_id: str
    actor_id: str
    event_type: str
    post_id: str | None = None
    comment_id: str | None = None
    read_at: datetime | None = None
    created_at: datetime | None = None

    @property
    def is_unread(self) -> bool:
        return self.read_at is None


__all__ = [
    "NOTIFICATION_TYPE_LIKE",
    "NOTIFICATION_TYPE_COMMENT",
    "NOTIFICATION_TYPE_FOLLOW",
    "NOTIFICATION_TYPE_MENTION",
    "NOTIFICATION_TYPES",
    "POST_GROUPED_TYPES",
    "RawEvent",
]
