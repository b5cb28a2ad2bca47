"""ORM models used by the application infrastructure."""

from .push_subscription import PushSubscriptionModel
from .raw_event import RawEventModel
from .user import UserModel

__all__ = ["PushSubscriptionModel", "RawEventModel", "UserModel"]
