"""Persistence helpers for push delivery endpoints."""

from __future__ import annotations

from collections.abc import Sequence

from sqlalchemy.orm import Session

from clario.domain.entities import PushSubscription
from clario.infrastructure.models import PushSubscriptionModel
from clario.utils import ensure_naive_utc, ensure_utc, now_utc

from ._errors import store_errors


class PushSubscriptionRepository:
    """Store push endpoints keyed by their endpoint URL or token."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def upsert(self, subscription: PushSubscription) -> PushSubscription:
        """Insert ``subscription`` or update the row sharing its endpoint."""

        now = ensure_naive_utc(now_utc())
        with store_errors(self.session, "save push subscription"):
            model = (
                self.session.query(PushSubscriptionModel)
                .filter(PushSubscriptionModel.endpoint == subscription.endpoint)
                .one_or_none()
            )
            if model is None:
                model = PushSubscriptionModel(endpoint=subscription.endpoint, created_at=now)
            model.user_id = subscription.user_id
            model.kind = subscription.kind
            model.p256dh = subscription.p256dh
            model.auth = subscription.auth
            model.updated_at = now
            self.session.add(model)
            self.session.commit()
            self.session.refresh(model)
        return self._to_entity(model)

    def list_for_user(self, user_id: str) -> Sequence[PushSubscription]:
        query = (
            self.session.query(PushSubscriptionModel)
            .filter(PushSubscriptionModel.user_id == user_id)
            .order_by(PushSubscriptionModel.created_at.asc())
        )
        with store_errors(self.session, "load push subscriptions"):
            models = query.all()
        return [self._to_entity(model) for model in models]

    @staticmethod
    def _to_entity(model: PushSubscriptionModel) -> PushSubscription:
        return PushSubscription(
            id=model.id,
            user_id=model.user_id,
            kind=model.kind,
            endpoint=model.endpoint,
            p256dh=model.p256dh,
            auth=model.auth,
            created_at=ensure_utc(model.created_at),
            updated_at=ensure_utc(model.updated_at),
        )


__all__ = ["PushSubscriptionRepository"]
