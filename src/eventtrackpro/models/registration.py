"""SQLModel Registration model"""

import enum
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import JSON, Column
from sqlalchemy import Enum as SAEnum
from sqlmodel import Field, SQLModel


class RegistrationStatus(str, enum.Enum):
    CONFIRMED = "confirmed"
    PENDING = "pending"


class WebhookStatus(str, enum.Enum):
    NOT_SENT = "not_sent"
    SENT = "sent"


class Registration(SQLModel, table=True):
    """Registration model for form submissions"""

    __tablename__ = "registrations"

    id: Optional[int] = Field(default=None, primary_key=True)
    # Not a foreign key: registrations outlive a hard-deleted event
    event_id: int = Field(index=True)
    # Keys are FormField ids of the event's linked form
    form_data: dict = Field(default_factory=dict, sa_column=Column(JSON))
    status: RegistrationStatus = Field(
        default=RegistrationStatus.CONFIRMED,
        sa_column=Column(
            SAEnum(
                RegistrationStatus,
                name="registration_status",
                native_enum=False,
                values_callable=lambda enum: [e.value for e in enum],
            ),
            nullable=False,
            server_default=RegistrationStatus.CONFIRMED.value,
        ),
    )
    webhook_status: WebhookStatus = Field(
        default=WebhookStatus.NOT_SENT,
        sa_column=Column(
            SAEnum(
                WebhookStatus,
                name="webhook_status",
                native_enum=False,
                values_callable=lambda enum: [e.value for e in enum],
            ),
            nullable=False,
            server_default=WebhookStatus.NOT_SENT.value,
        ),
    )
    attended: bool = Field(default=False)
    attendance_notes: Optional[str] = None
    created_at: Optional[datetime] = Field(
        default_factory=lambda: datetime.now(timezone.utc)
    )
