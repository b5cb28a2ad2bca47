"""Translate database driver failures into :class:`StoreError`."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from clario.domain.exceptions import StoreError


@contextmanager
def store_errors(session: Session, action: str, *, rollback: bool = True) -> Iterator[None]:
    """Re-raise SQLAlchemy failures raised while ``action`` runs as :class:`StoreError`.

    The session is rolled back first unless ``rollback`` is false, in which
    case the enclosing savepoint owns the cleanup.
    """

    try:
        yield
    except SQLAlchemyError as exc:
        if rollback:
            session.rollback()
        raise StoreError(f"Could not {action}: {exc}") from exc
