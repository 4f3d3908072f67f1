"""SQLModel Webhook subscription model"""

import enum
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import JSON, Column
from sqlmodel import Field, SQLModel


class WebhookEventType(str, enum.Enum):
    """Fixed set of occurrences a webhook can subscribe to"""

    REGISTRATION_CREATED = "registration.created"
    EVENT_CREATED = "event.created"
    EVENT_UPDATED = "event.updated"
    ATTENDANCE_UPDATED = "attendance.updated"


class Webhook(SQLModel, table=True):
    """Outbound webhook subscription (e.g. a Zapier catch hook)"""

    __tablename__ = "webhooks"

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str
    url: str
    secret: Optional[str] = None  # HMAC-SHA256 signing secret
    events: List[str] = Field(default_factory=list, sa_column=Column(JSON))
    active: bool = Field(default=True)
    created_at: Optional[datetime] = Field(
        default_factory=lambda: datetime.now(timezone.utc)
    )

    def is_subscribed_to(self, event_type: str) -> bool:
        return event_type in (self.events or [])
