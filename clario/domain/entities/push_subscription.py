"""Domain entity for a registered push delivery endpoint."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

PUSH_KIND_WEB = "web"
PUSH_KIND_EXPO = "expo"

EXPO_TOKEN_PREFIX = "ExponentPushToken["


@dataclass
class PushSubscription:
    """Web push endpoint with its encryption keys, or an Expo push token.

    For Expo subscriptions ``endpoint`` holds the token and both keys are
    ``None``.
    """

    id: str | None
    user_id: str
    kind: str
    endpoint: str
    p256dh: str | None = None
    auth: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


__all__ = ["PUSH_KIND_WEB", "PUSH_KIND_EXPO", "EXPO_TOKEN_PREFIX", "PushSubscription"]
