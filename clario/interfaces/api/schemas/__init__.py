"""Pydantic schemas used by the API layer."""

from .notification import (
    ActorRead,
    AggregatedNotificationRead,
    NotificationFeedResponse,
    NotificationMarkReadRequest,
    PushPublicKeyResponse,
    SuccessResponse,
    UnreadCountResponse,
)

__all__ = [
    "ActorRead",
    "AggregatedNotificationRead",
    "NotificationFeedResponse",
    "NotificationMarkReadRequest",
    "PushPublicKeyResponse",
    "SuccessResponse",
    "UnreadCountResponse",
]
