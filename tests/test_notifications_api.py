"""HTTP and websocket tests for the notification routes."""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from clario.config import reset_settings_cache
from clario.domain.exceptions import StoreError
from clario.infrastructure import database
from clario.infrastructure.models import PushSubscriptionModel
from clario.infrastructure.security import create_access_token
from clario.interfaces.api.routes import notifications as routes_module


@pytest.fixture()
def users(make_user):
    make_user("R", "riley")
    make_user("A", "alice", "https://cdn.example/alice.png")
    make_user("B", "bob")


def _push_rows() -> list[PushSubscriptionModel]:
    db = database.SessionLocal()
    try:
        return db.query(PushSubscriptionModel).all()
    finally:
        db.close()


def test_requires_bearer_token(client: TestClient, users):
    assert client.get("/notifications").status_code == 401

    response = client.get("/notifications", headers={"Authorization": "Bearer nope"})
    assert response.status_code == 401
    assert response.headers["www-authenticate"] == "Bearer"


def test_token_for_unknown_user_is_rejected(client: TestClient, auth_headers, users):
    response = client.get("/notifications/unread-count", headers=auth_headers("ghost"))

    assert response.status_code == 401


def test_feed_returns_grouped_page(client: TestClient, auth_headers, add_event, users):
    add_event("R", "A", "like", minutes=1, post_id="P1")
    add_event("R", "B", "like", minutes=2, post_id="P1")
    add_event("R", "A", "follow", minutes=3)

    response = client.get("/notifications?limit=1", headers=auth_headers("R"))

    assert response.status_code == 200
    body = response.json()
    assert body["hasMore"] is True
    (item,) = body["items"]
    assert item["type"] == "follow"
    assert item["actors"][0]["username"] == "alice"
    assert item["actors"][0]["avatar_url"] == "https://cdn.example/alice.png"

    second = client.get("/notifications?limit=1&offset=1", headers=auth_headers("R")).json()
    assert second["hasMore"] is False
    assert [actor["username"] for actor in second["items"][0]["actors"]] == ["bob", "alice"]
    assert second["items"][0]["total_actor_count"] == 2


def test_feed_tolerates_malformed_pagination(client: TestClient, auth_headers, add_event, users):
    for minute in range(3):
        add_event("R", "A", "like", minutes=minute, post_id=f"P{minute}")

    for query in ("limit=abc&offset=-4", "limit=500", "limit=0&offset=xyz"):
        response = client.get(f"/notifications?{query}", headers=auth_headers("R"))
        assert response.status_code == 200
        assert len(response.json()["items"]) == 3

    negative = client.get("/notifications?limit=-5", headers=auth_headers("R")).json()
    assert len(negative["items"]) == 1
    assert negative["hasMore"] is True


def test_store_failure_maps_to_server_error(client: TestClient, auth_headers, users, monkeypatch):
    def broken(*args, **kwargs):
        raise StoreError("database unavailable")

    monkeypatch.setattr(routes_module, "get_notification_feed", broken)

    response = client.get("/notifications", headers=auth_headers("R"))

    assert response.status_code == 500
    assert response.json()["detail"] == "Could not load notifications"


def test_mark_read_single_then_all(client: TestClient, auth_headers, add_event, users):
    first = add_event("R", "A", "like", minutes=1, post_id="P1")
    add_event("R", "B", "follow", minutes=2)
    headers = auth_headers("R")

    assert client.get("/notifications/unread-count", headers=headers).json() == {"count": 2}

    response = client.post("/notifications/read", json={"id": first.id}, headers=headers)
    assert response.json() == {"success": True}
    assert client.get("/notifications/unread-count", headers=headers).json() == {"count": 1}

    assert client.post("/notifications/read", json={}, headers=headers).status_code == 200
    assert client.get("/notifications/unread-count", headers=headers).json() == {"count": 0}


def test_mark_read_without_body_marks_everything(client: TestClient, auth_headers, add_event, users):
    add_event("R", "A", "like", minutes=1, post_id="P1")
    add_event("R", "A", "comment", minutes=2, post_id="P1")
    headers = auth_headers("R")

    assert client.post("/notifications/read", headers=headers).status_code == 200
    assert client.get("/notifications/unread-count", headers=headers).json() == {"count": 0}


def test_mark_read_ignores_other_users_events(client: TestClient, auth_headers, add_event, users):
    foreign = add_event("A", "B", "follow", minutes=1)

    client.post("/notifications/read", json={"ids": [foreign.id]}, headers=auth_headers("R"))

    assert client.get("/notifications/unread-count", headers=auth_headers("A")).json() == {
        "count": 1
    }


def test_register_web_push_twice_keeps_one_row(client: TestClient, auth_headers, users):
    descriptor = {
        "endpoint": "https://push.example/send/abc",
        "keys": {"p256dh": "BPkey", "auth": "secret"},
    }

    for user_id in ("R", "A"):
        response = client.post("/notifications/push", json=descriptor, headers=auth_headers(user_id))
        assert response.status_code == 200

    (row,) = _push_rows()
    assert row.kind == "web"
    assert row.user_id == "A"


def test_register_expo_token(client: TestClient, auth_headers, users):
    response = client.post(
        "/notifications/push",
        json={"token": "ExponentPushToken[xyz]"},
        headers=auth_headers("R"),
    )

    assert response.status_code == 200
    (row,) = _push_rows()
    assert row.kind == "expo"
    assert row.endpoint == "ExponentPushToken[xyz]"


@pytest.mark.parametrize(
    "descriptor",
    [
        {"token": "not-a-token"},
        {"endpoint": "https://push.example/send/abc"},
        {"endpoint": "push.example", "keys": {"p256dh": "k", "auth": "a"}},
    ],
)
def test_register_push_rejects_invalid_descriptor(
    client: TestClient, auth_headers, users, descriptor
):
    response = client.post("/notifications/push", json=descriptor, headers=auth_headers("R"))

    assert response.status_code == 400
    assert _push_rows() == []


def test_websocket_init_ping_and_ack(client: TestClient, add_event, users):
    event = add_event("R", "A", "like", minutes=1, post_id="P1")
    add_event("R", "B", "follow", minutes=2)
    token = create_access_token("R")

    with client.websocket_connect(f"/notifications/ws?token={token}") as websocket:
        assert websocket.receive_json() == {"type": "init", "data": {"unread_count": 2}}

        websocket.send_json({"type": "ack", "ids": [event.id]})
        websocket.send_json({"type": "ping"})
        assert websocket.receive_json() == {"type": "pong"}

    response = client.get(
        "/notifications/unread-count", headers={"Authorization": f"Bearer {token}"}
    )
    assert response.json() == {"count": 1}


def test_websocket_rejects_missing_token(client: TestClient):
    from starlette.websockets import WebSocketDisconnect

    with pytest.raises(WebSocketDisconnect):
        with client.websocket_connect("/notifications/ws") as websocket:
            websocket.receive_json()


def test_push_public_key_requires_configuration(client: TestClient):
    response = client.get("/notifications/push/public-key")

    assert response.status_code == 404


def test_push_public_key_is_served_from_settings(client: TestClient, monkeypatch):
    monkeypatch.setenv("VAPID_PUBLIC_KEY", "BPublicKey")
    reset_settings_cache()

    response = client.get("/notifications/push/public-key")

    assert response.status_code == 200
    assert response.json() == {"public_key": "BPublicKey"}
