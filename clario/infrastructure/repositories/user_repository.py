"""Persistence layer for user identities."""

from __future__ import annotations

from collections.abc import Iterable

from sqlalchemy.orm import Session

from clario.domain.entities import User
from clario.infrastructure.models import UserModel
from clario.utils import ensure_utc

from ._errors import store_errors


class UserRepository:
    """Resolve user identities for display."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def get(self, user_id: str) -> User | None:
        with store_errors(self.session, "load user"):
            model = self.session.get(UserModel, user_id)
        return self._to_entity(model) if model else None

    def get_map_by_ids(self, user_ids: Iterable[str]) -> dict[str, User]:
        """Return the users matching ``user_ids`` keyed by id in one query."""

        ids = list(dict.fromkeys(user_id for user_id in user_ids if user_id))
        if not ids:
            return {}
        query = self.session.query(UserModel).filter(UserModel.id.in_(ids))
        with store_errors(self.session, "load users"):
            models = query.all()
        return {model.id: self._to_entity(model) for model in models}

    def create(self, user: User) -> User:
        model = UserModel(id=user.id, username=user.username, avatar_url=user.avatar_url)
        with store_errors(self.session, "create user"):
            self.session.add(model)
            self.session.commit()
            self.session.refresh(model)
        return self._to_entity(model)

    @staticmethod
    def _to_entity(model: UserModel) -> User:
        return User(
            id=model.id,
            username=model.username,
            avatar_url=model.avatar_url,
            created_at=ensure_utc(model.created_at),
        )


__all__ = ["UserRepository"]
