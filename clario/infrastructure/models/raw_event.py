"""SQLAlchemy model for the raw notification ledger."""

from uuid import uuid4

from sqlalchemy import Column, DateTime, ForeignKey, Index, String

from clario.infrastructure.database import Base
from clario.utils import ensure_naive_utc, now_utc


def _new_id() -> str:
    return str(uuid4())


def _naive_now():
    return ensure_naive_utc(now_utc())


class RawEventModel(Base):
    """One row per like/comment/follow/mention addressed to a recipient."""

    __tablename__ = "notification"
    __table_args__ = (
        Index("ix_notification_user_created", "user_id", "created_at"),
    )

    id = Column(String(36), primary_key=True, default=_new_id)
    user_id = Column(String(36), ForeignKey("user.id"), nullable=False, index=True)
    actor_id = Column(String(36), nullable=False)
    type = Column(String(20), nullable=False)
    post_id = Column(String(36), nullable=True)
    comment_id = Column(String(36), nullable=True)
    read_at = Column(DateTime(), nullable=True)
    created_at = Column(DateTime(), nullable=False, default=_naive_now)


__all__ = ["RawEventModel"]
