"""Validate and store push delivery endpoints."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any
from urllib.parse import urlparse

from sqlalchemy.orm import Session

from clario.domain.entities import (
    EXPO_TOKEN_PREFIX,
    PUSH_KIND_EXPO,
    PUSH_KIND_WEB,
    PushSubscription,
)
from clario.domain.exceptions import PushEndpointValidationError
from clario.infrastructure.repositories import PushSubscriptionRepository


def parse_push_descriptor(user_id: str, descriptor: Any) -> PushSubscription:
    """Build a :class:`PushSubscription` from a client supplied descriptor.

    Two shapes are accepted: ``{"endpoint": ..., "keys": {"p256dh": ..., "auth": ...}}``
    for browsers and ``{"token": "ExponentPushToken[...]"}`` for the mobile app.
    """

    if not isinstance(descriptor, Mapping):
        raise PushEndpointValidationError("Push descriptor must be an object")

    if "token" in descriptor:
        token = _clean(descriptor.get("token"))
        if not token.startswith(EXPO_TOKEN_PREFIX) or not token.endswith("]"):
            raise PushEndpointValidationError("Valid Expo push token is required")
        return PushSubscription(id=None, user_id=user_id, kind=PUSH_KIND_EXPO, endpoint=token)

    endpoint = _clean(descriptor.get("endpoint"))
    keys = descriptor.get("keys")
    p256dh = _clean(keys.get("p256dh")) if isinstance(keys, Mapping) else ""
    auth = _clean(keys.get("auth")) if isinstance(keys, Mapping) else ""
    if not endpoint or not p256dh or not auth:
        raise PushEndpointValidationError("endpoint and keys are required")

    parsed = urlparse(endpoint)
    if parsed.scheme not in {"https", "http"} or not parsed.netloc:
        raise PushEndpointValidationError("endpoint must be an absolute URL")

    return PushSubscription(
        id=None,
        user_id=user_id,
        kind=PUSH_KIND_WEB,
        endpoint=endpoint,
        p256dh=p256dh,
        auth=auth,
    )


def _clean(value: Any) -> str:
    return value.strip() if isinstance(value, str) else ""


def register_push_endpoint(
    session: Session, user_id: str, descriptor: Any
) -> PushSubscription:
    """Validate ``descriptor`` and upsert it for ``user_id`` keyed by endpoint."""

    subscription = parse_push_descriptor(user_id, descriptor)
    return PushSubscriptionRepository(session).upsert(subscription)


__all__ = ["parse_push_descriptor", "register_push_endpoint"]
