"""Database models for EventTrackPro"""

from eventtrackpro.models.event import Event
from eventtrackpro.models.field_type import FieldType
from eventtrackpro.models.form import Form, FormField
from eventtrackpro.models.registration import (
    Registration,
    RegistrationStatus,
    WebhookStatus,
)
from eventtrackpro.models.user import User
from eventtrackpro.models.webhook import Webhook, WebhookEventType

__all__ = [
    "Event",
    "FieldType",
    "Form",
    "FormField",
    "Registration",
    "RegistrationStatus",
    "WebhookStatus",
    "User",
    "Webhook",
    "WebhookEventType",
]
