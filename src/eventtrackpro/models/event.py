"""SQLModel Event model"""

from datetime import datetime, timezone
from typing import Optional

from sqlmodel import Field, SQLModel


class Event(SQLModel, table=True):
    """A schedulable activity with capacity and optional form-based registration"""

    __tablename__ = "events"

    id: Optional[int] = Field(default=None, primary_key=True)
    title: str
    description: Optional[str] = None
    date: str = Field(index=True)  # ISO date, e.g. "2025-03-14"
    start_time: Optional[str] = None  # "HH:MM"
    end_time: Optional[str] = None
    location: Optional[str] = None
    capacity: int = Field(ge=1)
    form_id: Optional[int] = Field(default=None, index=True)  # weak reference, no FK
    created_at: Optional[datetime] = Field(
        default_factory=lambda: datetime.now(timezone.utc)
    )
