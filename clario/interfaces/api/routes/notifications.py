"""Endpoints and websocket handler for the notification feed."""

from __future__ import annotations

import logging
from typing import Any

from fastapi import (
    APIRouter,
    Body,
    Depends,
    HTTPException,
    Query,
    WebSocket,
    WebSocketDisconnect,
    status,
)
from sqlalchemy.orm import Session

from clario.application.use_cases.notifications import (
    get_notification_feed,
    get_unread_count,
    mark_read,
    register_push_endpoint,
)
from clario.config import get_settings
from clario.domain.entities import User
from clario.domain.exceptions import PushEndpointValidationError, StoreError
from clario.infrastructure.database import SessionLocal, get_db
from clario.infrastructure.notifications import notification_manager
from clario.interfaces.api.dependencies import get_current_user, resolve_current_user
from clario.interfaces.api.schemas import (
    NotificationFeedResponse,
    NotificationMarkReadRequest,
    PushPublicKeyResponse,
    SuccessResponse,
    UnreadCountResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/notifications", tags=["notifications"])


def _store_failure(message: str, exc: StoreError) -> HTTPException:
    logger.error("%s: %s", message, exc)
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=message
    )


@router.get("", response_model=NotificationFeedResponse)
def list_notifications(
    limit: str | None = Query(default=None),
    offset: str | None = Query(default=None),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> NotificationFeedResponse:
    """Return one page of aggregated notifications for the authenticated user."""

    try:
        page = get_notification_feed(db, current_user.id, limit=limit, offset=offset)
    except StoreError as exc:
        raise _store_failure("Could not load notifications", exc) from exc
    return NotificationFeedResponse.from_page(page)


@router.get("/unread-count", response_model=UnreadCountResponse)
def unread_count(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> UnreadCountResponse:
    try:
        count = get_unread_count(db, current_user.id)
    except StoreError as exc:
        raise _store_failure("Could not load unread count", exc) from exc
    return UnreadCountResponse(count=count)


@router.post("/read", response_model=SuccessResponse)
def mark_notifications_read(
    payload: NotificationMarkReadRequest | None = Body(default=None),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> SuccessResponse:
    """Mark the given notifications, or all of them when no ids are sent, as read."""

    event_ids = payload.target_ids() if payload is not None else None
    try:
        mark_read(db, current_user.id, event_ids)
    except StoreError as exc:
        raise _store_failure("Could not mark notifications as read", exc) from exc
    return SuccessResponse()


@router.get("/push/public-key", response_model=PushPublicKeyResponse)
def push_public_key() -> PushPublicKeyResponse:
    """Return the VAPID public key browsers need to create a subscription."""

    public_key = get_settings().vapid_public_key
    if not public_key:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Web push is not configured"
        )
    return PushPublicKeyResponse(public_key=public_key)


@router.post("/push", response_model=SuccessResponse)
def register_push(
    descriptor: dict[str, Any] = Body(...),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> SuccessResponse:
    """Store a web push subscription or an Expo push token for the user."""

    try:
        register_push_endpoint(db, current_user.id, descriptor)
    except PushEndpointValidationError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except StoreError as exc:
        raise _store_failure("Could not save push subscription", exc) from exc
    return SuccessResponse()


@router.websocket("/ws")
async def notifications_websocket(websocket: WebSocket) -> None:
    """Websocket endpoint that streams new raw events to the authenticated user."""

    token = websocket.query_params.get("token")
    if not token:
        await websocket.close(code=1008)
        return

    session = SessionLocal()
    try:
        user = resolve_current_user(token, session)
        pending_count = get_unread_count(session, user.id)
    except HTTPException:
        await websocket.close(code=1008)
        return
    except StoreError:
        await websocket.close(code=1011)
        return
    finally:
        session.close()

    await notification_manager.connect(user.id, websocket)
    try:
        await websocket.send_json({"type": "init", "data": {"unread_count": pending_count}})
        while True:
            try:
                message = await websocket.receive_json()
            except WebSocketDisconnect:
                raise
            except ValueError:
                continue

            if not isinstance(message, dict):
                continue

            message_type = message.get("type")
            if message_type == "ping":
                await websocket.send_json({"type": "pong"})
                continue

            if message_type == "ack":
                ids = message.get("ids", [])
                if isinstance(ids, list) and ids:
                    _acknowledge(user.id, [str(item) for item in ids])
                continue
    except WebSocketDisconnect:
        notification_manager.disconnect(user.id, websocket)
    except Exception:
        notification_manager.disconnect(user.id, websocket)
        raise


def _acknowledge(user_id: str, ids: list[str]) -> None:
    ack_session = SessionLocal()
    try:
        mark_read(ack_session, user_id, ids)
    except StoreError:
        logger.warning("Could not acknowledge notifications for user %s", user_id, exc_info=True)
    finally:
        ack_session.close()
