"""Registration endpoints: public sign-up, admin management, webhook re-send"""

import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException, Response
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field, field_validator
from sqlmodel import Session

from eventtrackpro.auth.dependencies import require_admin
from eventtrackpro.backends.webhook_client import WebhookClient
from eventtrackpro.config import config
from eventtrackpro.models.database import get_db
from eventtrackpro.models.registration import RegistrationStatus, WebhookStatus
from eventtrackpro.routers.request_validator import either_case, reject_null
from eventtrackpro.services.event_service import EventService
from eventtrackpro.services.notification_service import NotificationService
from eventtrackpro.services.registration_service import (
    EventFullError,
    EventNotFoundError,
    RegistrationService,
)
from eventtrackpro.services.submission_validator import SubmissionValidationError
from eventtrackpro.services.webhook_client_service import get_webhook_client

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/registrations", tags=["Registrations"])


class RegistrationCreateRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    event_id: int = Field(..., validation_alias=either_case("event_id"))
    form_data: Dict[str, Any] = Field(
        default_factory=dict, validation_alias=either_case("form_data")
    )
    status: RegistrationStatus = RegistrationStatus.CONFIRMED


class RegistrationUpdateRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    form_data: Optional[Dict[str, Any]] = Field(
        default=None, validation_alias=either_case("form_data")
    )
    status: Optional[RegistrationStatus] = None
    webhook_status: Optional[WebhookStatus] = Field(
        default=None, validation_alias=either_case("webhook_status")
    )
    attended: Optional[bool] = None
    attendance_notes: Optional[str] = Field(
        default=None, validation_alias=either_case("attendance_notes")
    )

    @field_validator("form_data", "status", "webhook_status", "attended")
    @classmethod
    def _not_null(cls, value):
        return reject_null(value)


@router.get("")
async def list_registrations(
    _admin=Depends(require_admin), db: Session = Depends(get_db)
):
    return RegistrationService(db).list_registrations()


@router.get("/{registration_id}")
async def get_registration(
    registration_id: int,
    _admin=Depends(require_admin),
    db: Session = Depends(get_db),
):
    registration = RegistrationService(db).get_registration_by_id(registration_id)
    if not registration:
        raise HTTPException(status_code=404, detail="Registration not found")
    return registration


@router.post("", status_code=201)
async def create_registration(
    registration_request: RegistrationCreateRequest,
    db: Session = Depends(get_db),
    webhook_client: WebhookClient = Depends(get_webhook_client),
):
    """
    Public registration endpoint.

    The registration is committed before registration.created is dispatched;
    webhook failures leave webhook_status at not_sent but never fail the
    request.
    """
    registration_service = RegistrationService(db)
    try:
        registration = registration_service.create_registration(
            registration_request.event_id,
            registration_request.form_data,
            status=registration_request.status,
        )
    except EventNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except EventFullError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except SubmissionValidationError as e:
        return JSONResponse(
            status_code=400,
            content={"detail": "Validation error", "errors": e.errors},
        )
    except Exception as e:
        logger.error(f"Failed to create registration: {e}")
        raise HTTPException(status_code=500, detail="Failed to create registration")

    notification_service = NotificationService(db, webhook_client, config)
    await notification_service.notify_registration_created(registration)

    return registration_service.get_registration_by_id(registration.id)


async def _update_registration(
    registration_id: int,
    update: RegistrationUpdateRequest,
    db: Session,
    webhook_client: WebhookClient,
):
    updates = update.model_dump(exclude_unset=True)
    try:
        registration = RegistrationService(db).update_registration(
            registration_id, updates
        )
    except Exception as e:
        logger.error(f"Failed to update registration {registration_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to update registration")

    if not registration:
        raise HTTPException(status_code=404, detail="Registration not found")

    if "attended" in updates:
        notification_service = NotificationService(db, webhook_client, config)
        await notification_service.notify_attendance_updated(registration)

    return registration


@router.put("/{registration_id}")
async def replace_registration(
    registration_id: int,
    update: RegistrationUpdateRequest,
    _admin=Depends(require_admin),
    db: Session = Depends(get_db),
    webhook_client: WebhookClient = Depends(get_webhook_client),
):
    return await _update_registration(registration_id, update, db, webhook_client)


@router.patch("/{registration_id}")
async def patch_registration(
    registration_id: int,
    update: RegistrationUpdateRequest,
    _admin=Depends(require_admin),
    db: Session = Depends(get_db),
    webhook_client: WebhookClient = Depends(get_webhook_client),
):
    """Partial update; changing attended dispatches attendance.updated"""
    return await _update_registration(registration_id, update, db, webhook_client)


@router.delete("/{registration_id}", status_code=204)
async def delete_registration(
    registration_id: int,
    _admin=Depends(require_admin),
    db: Session = Depends(get_db),
):
    try:
        deleted = RegistrationService(db).delete_registration(registration_id)
    except Exception as e:
        logger.error(f"Failed to delete registration {registration_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to delete registration")

    if not deleted:
        raise HTTPException(status_code=404, detail="Registration not found")
    return Response(status_code=204)


@router.post("/{registration_id}/webhook")
async def resend_registration_webhook(
    registration_id: int,
    _admin=Depends(require_admin),
    db: Session = Depends(get_db),
    webhook_client: WebhookClient = Depends(get_webhook_client),
):
    """Re-send registration.created for one registration"""
    registration_service = RegistrationService(db)
    registration = registration_service.get_registration_by_id(registration_id)
    if not registration:
        raise HTTPException(status_code=404, detail="Registration not found")
    if not EventService(db).get_event(registration.event_id):
        raise HTTPException(status_code=404, detail="Event not found")

    notification_service = NotificationService(db, webhook_client, config)
    result = await notification_service.notify_registration_created(
        registration, manual=True
    )

    registration = registration_service.get_registration_by_id(registration_id)
    return {
        "message": result.message,
        "webhook_status": registration.webhook_status,
        "deliveries": [delivery.to_dict() for delivery in result.deliveries],
    }
