"""Delivery transports for web push endpoints and Expo push tokens."""

from __future__ import annotations

import json
from dataclasses import dataclass
from functools import partial
from typing import Any, Protocol

import anyio
import httpx
from pywebpush import WebPushException, webpush

from clario.domain.entities import PUSH_KIND_EXPO, PUSH_KIND_WEB, PushSubscription
from clario.domain.exceptions import PushDeliveryError


@dataclass(frozen=True)
class PushMessage:
    """Payload delivered to every endpoint of a recipient."""

    title: str
    url: str
    event_type: str
    post_id: str | None = None

    def to_web_payload(self) -> str:
        return json.dumps({"title": self.title, "url": self.url, "type": self.event_type})


class PushTransport(Protocol):
    """Sends one :class:`PushMessage` to one endpoint, raising on failure."""

    kind: str

    async def send(self, subscription: PushSubscription, message: PushMessage) -> None:
        ...


class WebPushTransport:
    """Deliver messages to browser push services using VAPID."""

    kind = PUSH_KIND_WEB

    def __init__(
        self,
        *,
        vapid_private_key: str,
        vapid_subject: str,
        ttl: int,
        timeout: float,
    ) -> None:
        self._vapid_private_key = vapid_private_key
        self._vapid_subject = vapid_subject
        self._ttl = ttl
        self._timeout = timeout

    async def send(self, subscription: PushSubscription, message: PushMessage) -> None:
        await anyio.to_thread.run_sync(
            partial(self._send_blocking, subscription, message.to_web_payload())
        )

    def _send_blocking(self, subscription: PushSubscription, data: str) -> None:
        subscription_info = {
            "endpoint": subscription.endpoint,
            "keys": {"p256dh": subscription.p256dh, "auth": subscription.auth},
        }
        try:
            webpush(
                subscription_info=subscription_info,
                data=data,
                vapid_private_key=self._vapid_private_key,
                # pywebpush adds "aud" and "exp" to the claims it receives.
                vapid_claims={"sub": self._vapid_subject},
                ttl=self._ttl,
                timeout=self._timeout,
            )
        except WebPushException as exc:
            status_code = getattr(exc.response, "status_code", None)
            raise PushDeliveryError(str(exc), status_code=status_code) from exc


class ExpoPushTransport:
    """Deliver messages to the Expo push API for the mobile app."""

    kind = PUSH_KIND_EXPO

    def __init__(
        self,
        *,
        url: str,
        timeout: float,
        access_token: str | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._url = url
        self._timeout = timeout
        self._access_token = access_token
        self._client = client

    async def send(self, subscription: PushSubscription, message: PushMessage) -> None:
        body = {
            "to": subscription.endpoint,
            "title": message.title,
            "body": message.title,
            "data": {"url": message.url, "type": message.event_type, "postId": message.post_id},
            "sound": "default",
        }
        headers = {"Accept": "application/json"}
        if self._access_token:
            headers["Authorization"] = f"Bearer {self._access_token}"

        if self._client is not None:
            response = await self._client.post(self._url, json=body, headers=headers)
        else:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                response = await client.post(self._url, json=body, headers=headers)

        if response.is_error:
            raise PushDeliveryError(
                f"Expo push API responded with status {response.status_code}",
                status_code=response.status_code,
            )
        _raise_for_ticket_error(response.json())


def _raise_for_ticket_error(payload: Any) -> None:
    """Raise when the Expo push ticket reports a per-token error."""

    if not isinstance(payload, dict):
        return
    ticket = payload.get("data")
    if isinstance(ticket, list):
        ticket = ticket[0] if ticket else None
    if isinstance(ticket, dict) and ticket.get("status") == "error":
        details = ticket.get("details") or {}
        reason = details.get("error") if isinstance(details, dict) else None
        raise PushDeliveryError(ticket.get("message") or reason or "Expo push ticket error")


__all__ = ["ExpoPushTransport", "PushMessage", "PushTransport", "WebPushTransport"]
