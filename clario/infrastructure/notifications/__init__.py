"""Realtime and push notification helpers for the infrastructure layer."""

from .listener import (
    LiveNotification,
    NotificationListener,
    Toast,
    create_local_listener,
)
from .manager import NotificationConnectionManager, notification_manager
from .publisher import (
    REALTIME_EVENT_TYPE,
    RawEventPublisher,
    dispatch_raw_event,
    raw_event_publisher,
    run_detached,
    serialize_raw_event,
)
from .push import PushDispatcher, build_push_transports, get_push_dispatcher
from .transports import ExpoPushTransport, PushMessage, PushTransport, WebPushTransport

__all__ = [
    "LiveNotification",
    "NotificationListener",
    "Toast",
    "create_local_listener",
    "NotificationConnectionManager",
    "notification_manager",
    "REALTIME_EVENT_TYPE",
    "RawEventPublisher",
    "dispatch_raw_event",
    "raw_event_publisher",
    "run_detached",
    "serialize_raw_event",
    "PushDispatcher",
    "build_push_transports",
    "get_push_dispatcher",
    "ExpoPushTransport",
    "PushMessage",
    "PushTransport",
    "WebPushTransport",
]
