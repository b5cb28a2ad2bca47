"""Shared fixtures for the notification service tests."""

from __future__ import annotations

import os
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

TEST_DB_PATH = Path(__file__).parent / "test.db"
os.environ["DATABASE_URL"] = f"sqlite:///{TEST_DB_PATH}"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["EXPO_PUSH_ENABLED"] = "false"
os.environ.pop("VAPID_PRIVATE_KEY", None)
os.environ.pop("VAPID_PUBLIC_KEY", None)

from clario.config import reset_settings_cache  # noqa: E402
from clario.domain.entities import RawEvent, User  # noqa: E402
from clario.infrastructure import database  # noqa: E402
from clario.infrastructure.repositories import RawEventRepository, UserRepository  # noqa: E402
from clario.infrastructure.security import create_access_token  # noqa: E402

BASE_TIME = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


def at(minutes: int) -> datetime:
    """Return a fixed timestamp ``minutes`` after the test epoch."""

    return BASE_TIME + timedelta(minutes=minutes)


@pytest.fixture(autouse=True)
def settings_cache():
    """Reload settings so environment overrides never leak between tests."""

    reset_settings_cache()
    yield
    reset_settings_cache()


@pytest.fixture(autouse=True)
def fresh_database():
    """Recreate every table before each test."""

    database.initialize_database()
    database.Base.metadata.drop_all(bind=database.engine, checkfirst=True)
    database.Base.metadata.create_all(bind=database.engine)
    yield
    database.Base.metadata.drop_all(bind=database.engine, checkfirst=True)


@pytest.fixture()
def session():
    db = database.SessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture()
def make_user(session):
    """Create identities on demand."""

    def _make(user_id: str, username: str | None = None, avatar_url: str | None = None) -> User:
        return UserRepository(session).create(
            User(id=user_id, username=username, avatar_url=avatar_url)
        )

    return _make


@pytest.fixture()
def add_event(session):
    """Insert a raw event with an explicit timestamp, bypassing the recorder."""

    def _add(
        recipient_id: str,
        actor_id: str,
        event_type: str,
        *,
        minutes: int,
        post_id: str | None = None,
        comment_id: str | None = None,
    ) -> RawEvent:
        return RawEventRepository(session).create(
            RawEvent(
                id=None,
                recipient_id=recipient_id,
                actor_id=actor_id,
                event_type=event_type,
                post_id=post_id,
                comment_id=comment_id,
                created_at=at(minutes),
            )
        )

    return _add


@pytest.fixture()
def auth_headers():
    def _headers(user_id: str) -> dict[str, str]:
        return {"Authorization": f"Bearer {create_access_token(user_id)}"}

    return _headers


@pytest.fixture()
def client():
    """Return a test client bound to a fresh application instance."""

    from fastapi.testclient import TestClient

    from main import create_app

    with TestClient(create_app()) as test_client:
        yield test_client
