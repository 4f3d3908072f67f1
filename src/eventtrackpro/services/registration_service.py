"""Registration service for handling form submissions"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from sqlmodel import Session, select

from eventtrackpro.models.event import Event
from eventtrackpro.models.form import Form
from eventtrackpro.models.registration import (
    Registration,
    RegistrationStatus,
    WebhookStatus,
)
from eventtrackpro.services.event_service import EventService
from eventtrackpro.services.submission_validator import validate_submission

logger = logging.getLogger(__name__)

_UPDATABLE_FIELDS = (
    "form_data",
    "status",
    "webhook_status",
    "attended",
    "attendance_notes",
)


class EventNotFoundError(ValueError):
    """Raised when registering for an event that does not exist"""


class EventFullError(ValueError):
    """Raised when an event has no remaining capacity"""


class RegistrationService:
    """Service for managing event registrations"""

    def __init__(self, db_session: Session):
        self.db = db_session
        self.event_service = EventService(db_session)

    def create_registration(
        self,
        event_id: int,
        form_data: Dict[str, Any],
        status: RegistrationStatus = RegistrationStatus.CONFIRMED,
    ) -> Registration:
        """
        Create a new registration for an event.

        The capacity check counts existing rows before inserting; concurrent
        submissions for the last spot can both pass it.

        Args:
            event_id: ID of the event
            form_data: Submitted values keyed by field id
            status: Initial registration status

        Returns:
            Registration: The created registration

        Raises:
            EventNotFoundError: If the event doesn't exist
            EventFullError: If the event is at capacity
            SubmissionValidationError: If form_data doesn't match the linked form
        """
        event = self.event_service.get_event(event_id)
        if not event:
            raise EventNotFoundError("Event not found")

        registration_count = self.event_service.get_registration_count(event_id)
        if registration_count >= event.capacity:
            raise EventFullError("Event is at full capacity")

        form = self.get_linked_form(event)
        if form is not None:
            validate_submission(form, form_data, self.event_service.event_ids())

        registration = Registration(
            event_id=event_id,
            form_data=dict(form_data),
            status=status,
            webhook_status=WebhookStatus.NOT_SENT,
            created_at=datetime.now(timezone.utc),
        )

        self.db.add(registration)
        self.db.commit()
        self.db.refresh(registration)

        logger.info(f"Created registration {registration.id} for event {event_id}")
        return registration

    def get_linked_form(self, event: Optional[Event]) -> Optional[Form]:
        """The form an event links to, if any"""
        if event is None or event.form_id is None:
            return None
        return self.db.get(Form, event.form_id)

    def get_registration_by_id(self, registration_id: int) -> Optional[Registration]:
        """Get a registration by ID"""
        return self.db.get(Registration, registration_id)

    def list_registrations(self) -> List[Registration]:
        statement = select(Registration).order_by(Registration.id)
        return list(self.db.exec(statement).all())

    def get_registrations_for_event(self, event_id: int) -> List[Registration]:
        """Get all registrations for a specific event"""
        statement = (
            select(Registration)
            .where(Registration.event_id == event_id)
            .order_by(Registration.id)
        )
        return list(self.db.exec(statement).all())

    def update_registration(
        self, registration_id: int, updates: Dict[str, Any]
    ) -> Optional[Registration]:
        """Partially update a registration; returns None if it does not exist"""
        registration = self.db.get(Registration, registration_id)
        if not registration:
            return None

        for field_name in _UPDATABLE_FIELDS:
            if field_name not in updates:
                continue
            value = updates[field_name]
            if field_name == "form_data":
                value = dict(value or {})
            setattr(registration, field_name, value)

        try:
            self.db.add(registration)
            self.db.commit()
            self.db.refresh(registration)
        except Exception as e:
            self.db.rollback()
            logger.error(f"Error updating registration {registration_id}: {e}")
            raise

        logger.info(f"Updated registration {registration_id}")
        return registration

    def delete_registration(self, registration_id: int) -> bool:
        registration = self.db.get(Registration, registration_id)
        if not registration:
            return False

        try:
            self.db.delete(registration)
            self.db.commit()
        except Exception as e:
            self.db.rollback()
            logger.error(f"Error deleting registration {registration_id}: {e}")
            raise

        logger.info(f"Deleted registration {registration_id}")
        return True

    def mark_webhook_sent(self, registration_id: int) -> Optional[Registration]:
        """
        Record a successful dispatch on the registration.

        The status only ever moves from not_sent to sent; a failed dispatch
        never calls this, so it never resets the flag.
        """
        return self.update_registration(
            registration_id, {"webhook_status": WebhookStatus.SENT}
        )
