"""Domain entities exposed by the application."""

from .aggregated_notification import (
    ActorIdentity,
    AggregatedNotification,
    NotificationFeedPage,
)
from .push_subscription import (
    EXPO_TOKEN_PREFIX,
    PUSH_KIND_EXPO,
    PUSH_KIND_WEB,
    PushSubscription,
)
from .raw_event import (
    NOTIFICATION_TYPE_COMMENT,
    NOTIFICATION_TYPE_FOLLOW,
    NOTIFICATION_TYPE_LIKE,
    NOTIFICATION_TYPE_MENTION,
    NOTIFICATION_TYPES,
    POST_GROUPED_TYPES,
    RawEvent,
)
from .user import User

__all__ = [
    "ActorIdentity",
    "AggregatedNotification",
    "NotificationFeedPage",
    "EXPO_TOKEN_PREFIX",
    "PUSH_KIND_EXPO",
    "PUSH_KIND_WEB",
    "PushSubscription",
    "NOTIFICATION_TYPE_COMMENT",
    "NOTIFICATION_TYPE_FOLLOW",
    "NOTIFICATION_TYPE_LIKE",
    "NOTIFICATION_TYPE_MENTION",
    "NOTIFICATION_TYPES",
    "POST_GROUPED_TYPES",
    "RawEvent",
    "User",
]
