"""Derived notification groups computed on every feed read."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime


@dataclass(frozen=True)
class ActorIdentity:
    """Display identity of an actor; fields are ``None`` for deleted accounts."""

    id: str
    username: str | None = None
    avatar_url: str | None = None


@dataclass
class AggregatedNotification:
    """Raw events sharing a group key, folded into one feed entry."""

    key: str
    event_type: str
    post_id: str | None
    comment_id: str | None
    member_event_ids: list[str]
    actors: list[ActorIdentity]
    total_actor_count: int
    is_unread: bool
    most_recent_at: datetime


@dataclass
class NotificationFeedPage:
    """One page of the aggregated notification feed."""

    items: list[AggregatedNotification] = field(default_factory=list)
    has_more: bool = False


__all__ = ["ActorIdentity", "AggregatedNotification", "NotificationFeedPage"]
