"""SQLAlchemy model for registered push endpoints."""

from uuid import uuid4

from sqlalchemy import Column, DateTime, ForeignKey, String

from clario.infrastructure.database import Base


class PushSubscriptionModel(Base):
    """Web push endpoint or Expo token owned by a user."""

    __tablename__ = "push_subscription"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid4()))
    user_id = Column(String(36), ForeignKey("user.id"), nullable=False, index=True)
    kind = Column(String(10), nullable=False)
    endpoint = Column(String(2048), nullable=False, unique=True)
    p256dh = Column(String(255), nullable=True)
    auth = Column(String(255), nullable=True)
    created_at = Column(DateTime(), nullable=False)
    updated_at = Column(DateTime(), nullable=False)


__all__ = ["PushSubscriptionModel"]
