"""Pydantic models describing notification payloads."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from clario.domain.entities import AggregatedNotification, NotificationFeedPage


class ActorRead(BaseModel):
    """Display identity of an actor; empty fields mean the account is gone."""

    id: str
    username: str | None = None
    avatar_url: str | None = None


class AggregatedNotificationRead(BaseModel):
    """One feed entry folding every raw event of a group."""

    key: str
    type: str
    post_id: str | None = None
    comment_id: str | None = None
    member_event_ids: list[str]
    actors: list[ActorRead]
    total_actor_count: int
    is_unread: bool
    most_recent_at: datetime

    @classmethod
    def from_entity(cls, item: AggregatedNotification) -> "AggregatedNotificationRead":
        return cls(
            key=item.key,
            type=item.event_type,
            post_id=item.post_id,
            comment_id=item.comment_id,
            member_event_ids=list(item.member_event_ids),
            actors=[
                ActorRead(id=actor.id, username=actor.username, avatar_url=actor.avatar_url)
                for actor in item.actors
            ],
            total_actor_count=item.total_actor_count,
            is_unread=item.is_unread,
            most_recent_at=item.most_recent_at,
        )


class NotificationFeedResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    items: list[AggregatedNotificationRead] = Field(default_factory=list)
    has_more: bool = Field(default=False, alias="hasMore")

    @classmethod
    def from_page(cls, page: NotificationFeedPage) -> "NotificationFeedResponse":
        return cls(
            items=[AggregatedNotificationRead.from_entity(item) for item in page.items],
            has_more=page.has_more,
        )


class UnreadCountResponse(BaseModel):
    count: int


class NotificationMarkReadRequest(BaseModel):
    """Ids to mark as read; an empty body marks every notification."""

    ids: list[str] | None = Field(default=None, description="Raw event identifiers")
    id: str | None = Field(default=None, description="Single raw event identifier")

    def target_ids(self) -> list[str] | None:
        """Return the requested ids without duplicates, or ``None`` for "all"."""

        if self.ids is None and self.id is None:
            return None
        requested = list(self.ids or [])
        if self.id is not None:
            requested.append(self.id)
        return list(dict.fromkeys(requested))


class PushPublicKeyResponse(BaseModel):
    """VAPID application server key browsers subscribe with."""

    public_key: str


class SuccessResponse(BaseModel):
    success: bool = True


__all__ = [
    "ActorRead",
    "AggregatedNotificationRead",
    "NotificationFeedResponse",
    "NotificationMarkReadRequest",
    "PushPublicKeyResponse",
    "SuccessResponse",
    "UnreadCountResponse",
]
