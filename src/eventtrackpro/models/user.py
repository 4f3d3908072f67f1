"""SQLModel User model"""

from datetime import datetime, timezone
from typing import Optional

from sqlmodel import Field, SQLModel


class User(SQLModel, table=True):
    """Admin user for session authentication"""

    __tablename__ = "users"

    id: Optional[int] = Field(default=None, primary_key=True)
    username: str = Field(unique=True, index=True)
    # Legacy plaintext column kept for compatibility with older accounts
    password: str = Field(default="")
    password_hash: Optional[str] = None
    email: Optional[str] = None
    role: Optional[str] = None
    active: bool = Field(default=True)
    last_login: Optional[datetime] = None
    created_at: Optional[datetime] = Field(
        default_factory=lambda: datetime.now(timezone.utc)
    )
