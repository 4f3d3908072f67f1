"""Event management endpoints"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request, Response
from pydantic import BaseModel, ConfigDict, Field, field_validator
from sqlmodel import Session

from eventtrackpro.auth.dependencies import require_admin
from eventtrackpro.backends.webhook_client import WebhookClient
from eventtrackpro.config import config
from eventtrackpro.models.database import get_db
from eventtrackpro.models.webhook import WebhookEventType
from eventtrackpro.routers.request_validator import (
    ClockTime,
    IsoDate,
    OptionalIsoDate,
    either_case,
    reject_null,
)
from eventtrackpro.services.event_service import EventService
from eventtrackpro.services.form_service import FormService
from eventtrackpro.services.notification_service import NotificationService
from eventtrackpro.services.registration_service import RegistrationService
from eventtrackpro.services.webhook_client_service import get_webhook_client

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/events", tags=["Events"])


class EventCreateRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    title: str = Field(..., min_length=1)
    description: Optional[str] = None
    date: IsoDate = Field(..., description="Event date, YYYY-MM-DD")
    start_time: ClockTime = Field(
        default=None, validation_alias=either_case("start_time")
    )
    end_time: ClockTime = Field(
        default=None, validation_alias=either_case("end_time")
    )
    location: Optional[str] = None
    capacity: int = Field(..., gt=0)
    form_id: Optional[int] = Field(
        default=None, validation_alias=either_case("form_id")
    )


class EventUpdateRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    title: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    date: OptionalIsoDate = None
    start_time: ClockTime = Field(
        default=None, validation_alias=either_case("start_time")
    )
    end_time: ClockTime = Field(
        default=None, validation_alias=either_case("end_time")
    )
    location: Optional[str] = None
    capacity: Optional[int] = Field(default=None, gt=0)
    form_id: Optional[int] = Field(
        default=None, validation_alias=either_case("form_id")
    )

    @field_validator("title", "date", "capacity")
    @classmethod
    def _not_null(cls, value):
        return reject_null(value)


@router.get("")
async def list_events(db: Session = Depends(get_db)):
    """All events with their registration counts"""
    event_service = EventService(db)
    return [
        event_service.with_registration_count(event)
        for event in event_service.list_events()
    ]


@router.get("/{event_id}")
async def get_event(event_id: int, db: Session = Depends(get_db)):
    event_service = EventService(db)
    event = event_service.get_event(event_id)
    if not event:
        raise HTTPException(status_code=404, detail="Event not found")
    return event_service.with_registration_count(event)


@router.post("", status_code=201)
async def create_event(
    request: Request,
    event_request: EventCreateRequest,
    _admin=Depends(require_admin),
    db: Session = Depends(get_db),
    webhook_client: WebhookClient = Depends(get_webhook_client),
):
    """Create an event and notify event.created subscribers"""
    try:
        event = EventService(db).create_event(event_request.model_dump())
    except Exception as e:
        logger.error(f"Failed to create event: {e}")
        raise HTTPException(status_code=500, detail="Failed to create event")

    notification_service = NotificationService(db, webhook_client, config)
    await notification_service.notify_event(
        WebhookEventType.EVENT_CREATED, event, str(request.base_url)
    )
    return event


@router.put("/{event_id}")
async def update_event(
    request: Request,
    event_id: int,
    event_request: EventUpdateRequest,
    _admin=Depends(require_admin),
    db: Session = Depends(get_db),
    webhook_client: WebhookClient = Depends(get_webhook_client),
):
    """Partially update an event and notify event.updated subscribers"""
    try:
        event = EventService(db).update_event(
            event_id, event_request.model_dump(exclude_unset=True)
        )
    except Exception as e:
        logger.error(f"Failed to update event {event_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to update event")

    if not event:
        raise HTTPException(status_code=404, detail="Event not found")

    notification_service = NotificationService(db, webhook_client, config)
    await notification_service.notify_event(
        WebhookEventType.EVENT_UPDATED, event, str(request.base_url)
    )
    return event


@router.delete("/{event_id}", status_code=204)
async def delete_event(
    event_id: int, _admin=Depends(require_admin), db: Session = Depends(get_db)
):
    try:
        deleted = EventService(db).delete_event(event_id)
    except Exception as e:
        logger.error(f"Failed to delete event {event_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to delete event")

    if not deleted:
        raise HTTPException(status_code=404, detail="Event not found")
    return Response(status_code=204)


@router.post("/{event_id}/form/{form_id}")
async def link_form(
    event_id: int,
    form_id: int,
    _admin=Depends(require_admin),
    db: Session = Depends(get_db),
):
    """Attach a registration form to an event"""
    event_service = EventService(db)
    if not event_service.get_event(event_id):
        raise HTTPException(status_code=404, detail="Event not found")
    if not FormService(db).get_form(form_id):
        raise HTTPException(status_code=404, detail="Form not found")

    return event_service.update_event(event_id, {"form_id": form_id})


@router.get("/{event_id}/registrations")
async def list_event_registrations(event_id: int, db: Session = Depends(get_db)):
    return RegistrationService(db).get_registrations_for_event(event_id)
