"""SQLAlchemy model for the user identity table."""

from sqlalchemy import Column, DateTime, String, func

from clario.infrastructure.database import Base


class UserModel(Base):
    """Public identity of a user as mirrored from the auth provider."""

    __tablename__ = "user"

    id = Column(String(36), primary_key=True)
    username = Column(String(50), nullable=True, unique=True, index=True)
    avatar_url = Column(String(500), nullable=True)
    created_at = Column(DateTime, nullable=False, server_default=func.now())


__all__ = ["UserModel"]
