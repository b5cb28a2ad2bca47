"""Aggregate raw events into the paginated notification feed."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from sqlalchemy.orm import Session

from clario.domain.entities import (
    POST_GROUPED_TYPES,
    ActorIdentity,
    AggregatedNotification,
    NotificationFeedPage,
    RawEvent,
)
from clario.infrastructure.repositories import RawEventRepository, UserRepository

# Only the most recent RAW_FETCH_WINDOW events take part in grouping; older
# history is left out of the feed even though it remains in the store.
RAW_FETCH_WINDOW = 300
DEFAULT_FEED_LIMIT = 20
MAX_FEED_LIMIT = 50
MAX_ACTORS_SHOWN = 2


def clamp_pagination(limit: Any = None, offset: Any = None) -> tuple[int, int]:
    """Coerce raw ``limit``/``offset`` values into a valid page window."""

    parsed_limit = _parse_int(limit)
    if not parsed_limit:
        parsed_limit = DEFAULT_FEED_LIMIT
    parsed_offset = _parse_int(offset)
    if parsed_offset is None or parsed_offset < 0:
        parsed_offset = 0
    return max(1, min(parsed_limit, MAX_FEED_LIMIT)), parsed_offset


def _parse_int(value: Any) -> int | None:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    try:
        return int(str(value).strip())
    except ValueError:
        return None


def group_key(event: RawEvent) -> tuple[str, ...]:
    """Return the grouping key: per post for likes and comments, per type otherwise."""

    if event.event_type in POST_GROUPED_TYPES:
        return (event.event_type, event.post_id or "")
    return (event.event_type,)


def aggregate_raw_events(
    events: Sequence[RawEvent],
    *,
    limit: int,
    offset: int,
    window_size: int = RAW_FETCH_WINDOW,
) -> NotificationFeedPage:
    """Group ``events`` (newest first) and return one page of groups.

    Actors are returned as bare identities; display fields are filled in by
    :func:`get_notification_feed`.
    """

    grouped: dict[tuple[str, ...], list[RawEvent]] = {}
    for event in events:
        grouped.setdefault(group_key(event), []).append(event)

    groups = [_build_group(key, members) for key, members in grouped.items()]
    # Two stable passes: equal timestamps fall back to ascending key order.
    groups.sort(key=lambda group: group.key)
    groups.sort(key=lambda group: group.most_recent_at, reverse=True)

    end = offset + limit
    has_more = len(groups) > end or len(events) >= window_size
    return NotificationFeedPage(items=groups[offset:end], has_more=has_more)


def _build_group(key: tuple[str, ...], members: list[RawEvent]) -> AggregatedNotification:
    head = members[0]
    distinct_actors = list(dict.fromkeys(event.actor_id for event in members))
    return AggregatedNotification(
        key=":".join(key),
        event_type=head.event_type,
        post_id=head.post_id,
        comment_id=head.comment_id,
        member_event_ids=[event.id for event in members if event.id],
        actors=[ActorIdentity(id=actor_id) for actor_id in distinct_actors[:MAX_ACTORS_SHOWN]],
        total_actor_count=len(distinct_actors),
        is_unread=any(event.is_unread for event in members),
        most_recent_at=head.created_at,
    )


def get_notification_feed(
    session: Session,
    recipient_id: str,
    *,
    limit: Any = DEFAULT_FEED_LIMIT,
    offset: Any = 0,
) -> NotificationFeedPage:
    """Return one page of aggregated notifications for ``recipient_id``.

    Store failures propagate as :class:`~clario.domain.exceptions.StoreError`.
    """

    page_limit, page_offset = clamp_pagination(limit, offset)
    events = RawEventRepository(session).list_recent_for_recipient(
        recipient_id, limit=RAW_FETCH_WINDOW
    )
    page = aggregate_raw_events(
        events, limit=page_limit, offset=page_offset, window_size=RAW_FETCH_WINDOW
    )
    _resolve_actor_identities(session, page.items)
    return page


def _resolve_actor_identities(
    session: Session, items: Sequence[AggregatedNotification]
) -> None:
    actor_ids = [actor.id for item in items for actor in item.actors]
    if not actor_ids:
        return
    users = UserRepository(session).get_map_by_ids(actor_ids)
    for item in items:
        resolved: list[ActorIdentity] = []
        for actor in item.actors:
            user = users.get(actor.id)
            if user is None:
                resolved.append(ActorIdentity(id=actor.id))
            else:
                resolved.append(
                    ActorIdentity(id=actor.id, username=user.username, avatar_url=user.avatar_url)
                )
        item.actors = resolved


__all__ = [
    "DEFAULT_FEED_LIMIT",
    "MAX_FEED_LIMIT",
    "RAW_FETCH_WINDOW",
    "aggregate_raw_events",
    "clamp_pagination",
    "get_notification_feed",
    "group_key",
]
