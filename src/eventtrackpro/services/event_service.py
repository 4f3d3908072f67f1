"""Event Service - Handles event database operations"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from sqlalchemy import func
from sqlmodel import Session, select

from eventtrackpro.models.event import Event
from eventtrackpro.models.registration import Registration

logger = logging.getLogger(__name__)

_UPDATABLE_FIELDS = (
    "title",
    "description",
    "date",
    "start_time",
    "end_time",
    "location",
    "capacity",
    "form_id",
)


class EventService:
    """Service for handling event operations"""

    def __init__(self, db_session: Session):
        self.db = db_session

    def list_events(self) -> List[Event]:
        statement = select(Event).order_by(Event.id)
        return list(self.db.exec(statement).all())

    def get_event(self, event_id: int) -> Optional[Event]:
        return self.db.get(Event, event_id)

    def event_ids(self) -> List[int]:
        """IDs of all stored events"""
        return list(self.db.exec(select(Event.id)).all())

    def create_event(self, data: Dict[str, Any]) -> Event:
        """
        Create a new event

        Args:
            data: title, date, capacity and optional description, start_time,
                end_time, location, form_id

        Returns:
            The created Event
        """
        event = Event(
            title=data["title"],
            description=data.get("description") or None,
            date=data["date"],
            start_time=data.get("start_time") or None,
            end_time=data.get("end_time") or None,
            location=data.get("location") or None,
            capacity=data["capacity"],
            form_id=data.get("form_id"),
            created_at=datetime.now(timezone.utc),
        )
        try:
            self.db.add(event)
            self.db.commit()
            self.db.refresh(event)
        except Exception as e:
            self.db.rollback()
            logger.error(f"Error creating event: {e}")
            raise

        logger.info(f"Event created successfully: {event.id}")
        return event

    def update_event(self, event_id: int, updates: Dict[str, Any]) -> Optional[Event]:
        """Partially update an event; returns None if it does not exist"""
        event = self.db.get(Event, event_id)
        if not event:
            return None

        for field_name in _UPDATABLE_FIELDS:
            if field_name in updates:
                setattr(event, field_name, updates[field_name])

        try:
            self.db.add(event)
            self.db.commit()
            self.db.refresh(event)
        except Exception as e:
            self.db.rollback()
            logger.error(f"Error updating event {event_id}: {e}")
            raise

        logger.info(f"Event updated successfully: {event_id}")
        return event

    def delete_event(self, event_id: int) -> bool:
        """Hard delete an event; returns False if it does not exist"""
        event = self.db.get(Event, event_id)
        if not event:
            return False

        try:
            self.db.delete(event)
            self.db.commit()
        except Exception as e:
            self.db.rollback()
            logger.error(f"Error deleting event {event_id}: {e}")
            raise

        logger.info(f"Event deleted: {event_id}")
        return True

    def get_registration_count(self, event_id: int) -> int:
        """Number of registrations stored for an event"""
        statement = (
            select(func.count())
            .select_from(Registration)
            .where(Registration.event_id == event_id)
        )
        return int(self.db.exec(statement).one())

    def with_registration_count(self, event: Event) -> Dict[str, Any]:
        """Serialize an event with its current registration count"""
        data = event.model_dump()
        data["registration_count"] = self.get_registration_count(event.id)
        return data
