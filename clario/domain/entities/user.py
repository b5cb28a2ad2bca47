"""Domain entity representing a user's public identity."""

from dataclasses import dataclass
from datetime import datetime


@dataclass
class User:
    """Identity issued by the authentication provider plus its display fields."""

    id: str
    username: str | None
    avatar_url: str | None = None
    created_at: datetime | None = None
