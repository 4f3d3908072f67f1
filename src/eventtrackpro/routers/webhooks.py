"""Webhook subscription management, manual triggers and the Zapier intake"""

import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Request, Response
from fastapi.responses import JSONResponse
from pydantic import AnyHttpUrl, BaseModel, ConfigDict, Field, field_validator
from sqlmodel import Session

from eventtrackpro.auth.dependencies import require_admin
from eventtrackpro.backends.webhook_client import (
    SIGNATURE_HEADER,
    WebhookClient,
    verify_signature,
)
from eventtrackpro.config import config
from eventtrackpro.models.database import get_db
from eventtrackpro.models.webhook import Webhook, WebhookEventType
from eventtrackpro.routers.request_validator import (
    ClockTime,
    IsoDate,
    either_case,
    reject_null,
)
from eventtrackpro.services.dispatch_service import WebhookDispatcher
from eventtrackpro.services.event_service import EventService
from eventtrackpro.services.notification_service import NotificationService
from eventtrackpro.services.webhook_client_service import get_webhook_client
from eventtrackpro.services.webhook_service import WebhookService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/webhooks", tags=["Webhooks"])


class WebhookCreateRequest(BaseModel):
    name: str = Field(..., min_length=1)
    url: AnyHttpUrl
    secret: Optional[str] = None
    events: List[WebhookEventType] = Field(..., min_length=1)
    active: bool = True


class WebhookUpdateRequest(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1)
    url: Optional[AnyHttpUrl] = None
    secret: Optional[str] = None
    events: Optional[List[WebhookEventType]] = Field(default=None, min_length=1)
    active: Optional[bool] = None

    @field_validator("name", "url", "events", "active")
    @classmethod
    def _not_null(cls, value):
        return reject_null(value)


class TriggerRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    event_type: str = Field(
        ...,
        pattern=r"^[a-z]+\.[a-z]+$",
        validation_alias=either_case("event_type"),
    )
    event_id: Optional[int] = Field(
        default=None, validation_alias=either_case("event_id")
    )
    data: Dict[str, Any]


class TestWebhookRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    webhook_id: int = Field(..., validation_alias=either_case("webhook_id"))
    event_type: str = Field(
        ..., min_length=1, validation_alias=either_case("event_type")
    )
    data: Dict[str, Any]


class TestEventRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    event_id: int = Field(..., validation_alias=either_case("event_id"))


class ExternalEventRequest(BaseModel):
    """Event pushed in by a Zapier action"""

    model_config = ConfigDict(populate_by_name=True)

    title: str = Field(..., min_length=1)
    description: Optional[str] = None
    date: IsoDate
    start_time: ClockTime = Field(
        default=None, validation_alias=either_case("start_time")
    )
    end_time: ClockTime = Field(
        default=None, validation_alias=either_case("end_time")
    )
    location: Optional[str] = None
    capacity: int = Field(..., gt=0)
    source: Optional[str] = None
    external_id: Optional[str] = Field(
        default=None, validation_alias=either_case("external_id")
    )


def _public_webhook(webhook: Webhook) -> Dict[str, Any]:
    """Webhook as returned to clients; the signing secret never leaves the server"""
    data = webhook.model_dump(exclude={"secret"})
    data["has_secret"] = bool(webhook.secret)
    return data


@router.get("")
async def list_webhooks(_admin=Depends(require_admin), db: Session = Depends(get_db)):
    webhooks = WebhookService(db).list_webhooks()
    return [_public_webhook(webhook) for webhook in webhooks]


@router.get("/{webhook_id}")
async def get_webhook(
    webhook_id: int, _admin=Depends(require_admin), db: Session = Depends(get_db)
):
    webhook = WebhookService(db).get_webhook(webhook_id)
    if not webhook:
        raise HTTPException(status_code=404, detail="Webhook not found")
    return _public_webhook(webhook)


@router.post("", status_code=201)
async def create_webhook(
    webhook_request: WebhookCreateRequest,
    _admin=Depends(require_admin),
    db: Session = Depends(get_db),
):
    try:
        webhook = WebhookService(db).create_webhook(
            webhook_request.model_dump(mode="json")
        )
    except Exception as e:
        logger.error(f"Failed to create webhook: {e}")
        raise HTTPException(status_code=500, detail="Failed to create webhook")
    return _public_webhook(webhook)


@router.put("/{webhook_id}")
async def update_webhook(
    webhook_id: int,
    webhook_request: WebhookUpdateRequest,
    _admin=Depends(require_admin),
    db: Session = Depends(get_db),
):
    """Partial update; omitted fields keep their stored values"""
    try:
        webhook = WebhookService(db).update_webhook(
            webhook_id, webhook_request.model_dump(mode="json", exclude_unset=True)
        )
    except Exception as e:
        logger.error(f"Failed to update webhook {webhook_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to update webhook")

    if not webhook:
        raise HTTPException(status_code=404, detail="Webhook not found")
    return _public_webhook(webhook)


@router.delete("/{webhook_id}", status_code=204)
async def delete_webhook(
    webhook_id: int, _admin=Depends(require_admin), db: Session = Depends(get_db)
):
    try:
        deleted = WebhookService(db).delete_webhook(webhook_id)
    except Exception as e:
        logger.error(f"Failed to delete webhook {webhook_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to delete webhook")

    if not deleted:
        raise HTTPException(status_code=404, detail="Webhook not found")
    return Response(status_code=204)


@router.post("/trigger")
async def trigger_webhooks(
    trigger_request: TriggerRequest,
    _admin=Depends(require_admin),
    db: Session = Depends(get_db),
    webhook_client: WebhookClient = Depends(get_webhook_client),
):
    """Fan an arbitrary payload out to the subscribers of an event type"""
    notification_service = NotificationService(db, webhook_client, config)
    result = await notification_service.trigger(
        trigger_request.event_type, trigger_request.data
    )
    return {
        "message": result.message,
        "deliveries": [delivery.to_dict() for delivery in result.deliveries],
    }


@router.post("/test")
async def test_webhook(
    test_request: TestWebhookRequest,
    _admin=Depends(require_admin),
    db: Session = Depends(get_db),
    webhook_client: WebhookClient = Depends(get_webhook_client),
):
    """Send one test payload to a single webhook and report its response"""
    webhook_service = WebhookService(db)
    webhook = webhook_service.get_webhook(test_request.webhook_id)
    if not webhook:
        raise HTTPException(status_code=404, detail="Webhook not found")
    if not webhook.active:
        raise HTTPException(status_code=400, detail="Cannot test inactive webhook")

    dispatcher = WebhookDispatcher(webhook_service, webhook_client)
    result = await dispatcher.send_test(
        webhook, test_request.event_type, test_request.data
    )
    if "error" in result:
        logger.warning(
            f"Test delivery to webhook {webhook.id} failed: {result['error']}"
        )
        return JSONResponse(status_code=400, content=result)
    return result


@router.post("/test-event")
async def test_event_webhook(
    request: Request,
    test_request: TestEventRequest,
    _admin=Depends(require_admin),
    db: Session = Depends(get_db),
    webhook_client: WebhookClient = Depends(get_webhook_client),
):
    """Send event.created for an existing event to its subscribers"""
    event = EventService(db).get_event(test_request.event_id)
    if not event:
        raise HTTPException(status_code=404, detail="Event not found")

    notification_service = NotificationService(db, webhook_client, config)
    result = await notification_service.notify_event(
        WebhookEventType.EVENT_CREATED, event, str(request.base_url)
    )
    return {
        "success": True,
        "message": "Event webhook triggered successfully",
        "deliveries": [delivery.to_dict() for delivery in result.deliveries],
    }


@router.post("/zapier/events", status_code=201)
async def receive_external_event(
    request: Request,
    external_event: ExternalEventRequest,
    db: Session = Depends(get_db),
):
    """
    Create an event from a Zapier payload.

    When ZAPIER_INBOUND_SECRET is configured, a request carrying an
    X-Webhook-Signature header must be signed with it.
    """
    signature = request.headers.get(SIGNATURE_HEADER)
    secret = config.get("zapier_inbound_secret")
    if signature and secret:
        body = await request.body()
        if not verify_signature(secret, body, signature):
            logger.warning("Rejected Zapier event with an invalid signature")
            raise HTTPException(status_code=401, detail="Invalid webhook signature")

    try:
        event = EventService(db).create_event(
            external_event.model_dump(exclude={"source", "external_id"})
        )
    except Exception as e:
        logger.error(f"Failed to process external event: {e}")
        raise HTTPException(
            status_code=500, detail="Failed to process external event"
        )

    logger.info(
        f"Created event {event.id} from external source "
        f"{external_event.source or 'unknown'} ({external_event.external_id})"
    )
    return {
        **event.model_dump(),
        "registration_url": f"/events/{event.id}/register",
    }
