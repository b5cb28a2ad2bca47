"""Public helpers for recording, aggregating and delivering notifications."""

from .feed import (
    DEFAULT_FEED_LIMIT,
    MAX_FEED_LIMIT,
    RAW_FETCH_WINDOW,
    aggregate_raw_events,
    clamp_pagination,
    get_notification_feed,
    group_key,
)
from .push_registration import parse_push_descriptor, register_push_endpoint
from .read_state import get_unread_count, mark_read
from .record import (
    notify_post_commented,
    notify_post_liked,
    notify_user_followed,
    notify_user_mentioned,
    record_event,
)

__all__ = [
    "DEFAULT_FEED_LIMIT",
    "MAX_FEED_LIMIT",
    "RAW_FETCH_WINDOW",
    "aggregate_raw_events",
    "clamp_pagination",
    "get_notification_feed",
    "group_key",
    "parse_push_descriptor",
    "register_push_endpoint",
    "get_unread_count",
    "mark_read",
    "notify_post_commented",
    "notify_post_liked",
    "notify_user_followed",
    "notify_user_mentioned",
    "record_event",
]
