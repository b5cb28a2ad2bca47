"""Repository implementations for infrastructure layer."""

from ._errors import store_errors
from .push_subscription_repository import PushSubscriptionRepository
from .raw_event_repository import RawEventRepository
from .user_repository import UserRepository

__all__ = [
    "PushSubscriptionRepository",
    "RawEventRepository",
    "UserRepository",
    "store_errors",
]
