"""Persistence helpers for the raw notification ledger."""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from sqlalchemy import func
from sqlalchemy.orm import Session

from clario.domain.entities import RawEvent
from clario.infrastructure.models import RawEventModel
from clario.utils import ensure_naive_utc, ensure_utc, now_utc

from ._errors import store_errors


class RawEventRepository:
    """Insert, scan and update :class:`RawEvent` rows."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def create(self, event: RawEvent) -> RawEvent:
        model = self._to_model(event)
        with store_errors(self.session, "record notification"):
            self.session.add(model)
            self.session.commit()
            self.session.refresh(model)
        return self._to_entity(model)

    def add(self, event: RawEvent) -> RawEvent:
        """Stage ``event`` in the current transaction without committing it.

        Failures leave the session to the caller, which is expected to wrap
        the call in a savepoint.
        """

        model = self._to_model(event)
        with store_errors(self.session, "record notification", rollback=False):
            self.session.add(model)
            self.session.flush()
            self.session.refresh(model)
        return self._to_entity(model)

    def get(self, event_id: str) -> RawEvent | None:
        with store_errors(self.session, "load notification"):
            model = self.session.get(RawEventModel, event_id)
        return self._to_entity(model) if model else None

    def list_recent_for_recipient(
        self, recipient_id: str, *, limit: int
    ) -> Sequence[RawEvent]:
        """Return up to ``limit`` events for ``recipient_id``, newest first."""

        query = (
            self.session.query(RawEventModel)
            .filter(RawEventModel.user_id == recipient_id)
            .order_by(RawEventModel.created_at.desc(), RawEventModel.id.desc())
            .limit(limit)
        )
        with store_errors(self.session, "load notifications"):
            models = query.all()
        return [self._to_entity(model) for model in models]

    def count_unread(self, recipient_id: str) -> int:
        query = (
            self.session.query(func.count(RawEventModel.id))
            .filter(RawEventModel.user_id == recipient_id)
            .filter(RawEventModel.read_at.is_(None))
        )
        with store_errors(self.session, "count unread notifications"):
            return int(query.scalar() or 0)

    def mark_read(
        self, recipient_id: str, event_ids: Iterable[str] | None = None
    ) -> int:
        """Set ``read_at`` on unread events owned by ``recipient_id``.

        With ``event_ids`` set to ``None`` every unread event is marked. Rows
        that are already read keep their original timestamp.
        """

        query = (
            self.session.query(RawEventModel)
            .filter(RawEventModel.user_id == recipient_id)
            .filter(RawEventModel.read_at.is_(None))
        )
        if event_ids is not None:
            ids = [event_id for event_id in event_ids if event_id]
            if not ids:
                return 0
            query = query.filter(RawEventModel.id.in_(ids))

        with store_errors(self.session, "mark notifications as read"):
            updated = query.update(
                {RawEventModel.read_at: ensure_naive_utc(now_utc())},
                synchronize_session=False,
            )
            self.session.commit()
        return int(updated or 0)

    @staticmethod
    def _to_model(event: RawEvent) -> RawEventModel:
        return RawEventModel(
            user_id=event.recipient_id,
            actor_id=event.actor_id,
            type=event.event_type,
            post_id=event.post_id,
            comment_id=event.comment_id,
            read_at=ensure_naive_utc(event.read_at),
            created_at=ensure_naive_utc(event.created_at or now_utc()),
        )

    @staticmethod
    def _to_entity(model: RawEventModel) -> RawEvent:
        return RawEvent(
            id=model.id,
            recipient_id=model.user_id,
            actor_id=model.actor_id,
            event_type=model.type,
            post_id=model.post_id,
            comment_id=model.comment_id,
            read_at=ensure_utc(model.read_at),
            created_at=ensure_utc(model.created_at),
        )


__all__ = ["RawEventRepository"]
