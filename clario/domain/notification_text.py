"""Human readable titles and link targets for raw notification events."""

from __future__ import annotations

from .entities import (
    NOTIFICATION_TYPE_COMMENT,
    NOTIFICATION_TYPE_FOLLOW,
    NOTIFICATION_TYPE_LIKE,
    NOTIFICATION_TYPE_MENTION,
)

UNKNOWN_ACTOR_NAME = "Someone"

_TITLE_TEMPLATES: dict[str, str] = {
    NOTIFICATION_TYPE_LIKE: "{username} liked your post",
    NOTIFICATION_TYPE_COMMENT: "{username} commented on your post",
    NOTIFICATION_TYPE_FOLLOW: "{username} started following you",
    NOTIFICATION_TYPE_MENTION: "{username} mentioned you",
}


def format_notification_title(event_type: str, username: str | None) -> str:
    """Return the one-line title shown for ``event_type`` caused by ``username``."""

    template = _TITLE_TEMPLATES.get(event_type)
    if template is None:
        return "New notification"
    return template.format(username=username or UNKNOWN_ACTOR_NAME)


def notification_target_path(post_id: str | None, actor_username: str | None) -> str:
    """Return the relative URL a notification should open."""

    if post_id:
        return f"/post/{post_id}"
    if actor_username:
        return f"/profile/{actor_username}"
    return "/notifications"


__all__ = [
    "UNKNOWN_ACTOR_NAME",
    "format_notification_title",
    "notification_target_path",
]
