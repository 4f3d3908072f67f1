"""Notification service - ties payload building, dispatch and status tracking.

Every public method here runs after the primary database change has been
committed. Failures are logged and reported through the return value, never
raised, so a webhook problem cannot undo a registration or event change.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from sqlmodel import Session

from eventtrackpro.backends.webhook_client import WebhookClient
from eventtrackpro.models.event import Event
from eventtrackpro.models.registration import Registration
from eventtrackpro.models.webhook import WebhookEventType
from eventtrackpro.services.dispatch_service import DispatchResult, WebhookDispatcher
from eventtrackpro.services.event_service import EventService
from eventtrackpro.services.payload_service import (
    build_attendance_payload,
    build_event_payload,
    build_registration_payload,
)
from eventtrackpro.services.registration_service import RegistrationService
from eventtrackpro.services.webhook_service import WebhookService
from eventtrackpro.utils.field_labels import FieldLabelResolver

logger = logging.getLogger(__name__)


class NotificationService:
    """Forwards domain changes to webhook subscribers"""

    def __init__(
        self, db_session: Session, webhook_client: WebhookClient, config: dict
    ):
        self.db = db_session
        self.event_service = EventService(db_session)
        self.registration_service = RegistrationService(db_session)
        self.dispatcher = WebhookDispatcher(
            WebhookService(db_session),
            webhook_client,
            max_concurrency=config.get("webhook_max_concurrency", 10),
        )

    async def _safe_dispatch(
        self, event_type: str, payload: Dict[str, Any]
    ) -> DispatchResult:
        try:
            return await self.dispatcher.dispatch(event_type, payload)
        except Exception as e:
            logger.error(f"Error triggering {event_type} webhooks: {e}")
            return DispatchResult(event_type=getattr(event_type, "value", event_type))

    def registration_payload(
        self, registration: Registration, extra: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        """Normalized registration.created payload for a stored registration"""
        event = self.event_service.get_event(registration.event_id)
        form = self.registration_service.get_linked_form(event)
        resolver = FieldLabelResolver.from_form(form)
        return build_registration_payload(registration, event, resolver, extra)

    async def notify_registration_created(
        self, registration: Registration, manual: bool = False
    ) -> DispatchResult:
        """
        Dispatch registration.created and record the outcome.

        Args:
            registration: A committed registration
            manual: True when re-sent from the admin UI

        Returns:
            DispatchResult; webhook_status is set to sent when it is triggered
        """
        extra = None
        if manual:
            extra = {
                "manually_triggered": True,
                "triggered_at": datetime.now(timezone.utc).isoformat(),
            }

        try:
            payload = self.registration_payload(registration, extra)
        except Exception as e:
            logger.error(
                f"Error building payload for registration {registration.id}: {e}"
            )
            return DispatchResult(
                event_type=WebhookEventType.REGISTRATION_CREATED.value
            )

        result = await self._safe_dispatch(
            WebhookEventType.REGISTRATION_CREATED.value, payload
        )

        if result.triggered:
            try:
                self.registration_service.mark_webhook_sent(registration.id)
            except Exception as e:
                # Status stays stale until the next manual trigger
                logger.error(
                    f"Failed to record webhook status for registration {registration.id}: {e}"
                )
        return result

    async def notify_event(
        self, event_type: WebhookEventType, event: Event, base_url: str = ""
    ) -> DispatchResult:
        """Dispatch event.created or event.updated for an event"""
        try:
            count = self.event_service.get_registration_count(event.id)
            payload = build_event_payload(event, count, base_url)
        except Exception as e:
            logger.error(f"Error building payload for event {event.id}: {e}")
            return DispatchResult(event_type=event_type.value)
        return await self._safe_dispatch(event_type.value, payload)

    async def notify_attendance_updated(
        self, registration: Registration
    ) -> Optional[DispatchResult]:
        """Dispatch attendance.updated; skipped when the event no longer exists"""
        try:
            event = self.event_service.get_event(registration.event_id)
            if not event:
                logger.info(
                    f"Skipping attendance webhook, event {registration.event_id} not found"
                )
                return None
            resolver = FieldLabelResolver.from_form(
                self.registration_service.get_linked_form(event)
            )
            payload = build_attendance_payload(event, registration, resolver)
        except Exception as e:
            logger.error(
                f"Error building attendance payload for registration {registration.id}: {e}"
            )
            return DispatchResult(event_type=WebhookEventType.ATTENDANCE_UPDATED.value)
        return await self._safe_dispatch(
            WebhookEventType.ATTENDANCE_UPDATED.value, payload
        )

    async def trigger(self, event_type: str, data: Dict[str, Any]) -> DispatchResult:
        """Fan out a caller-supplied payload, stamped as a manual trigger"""
        enriched = {
            **data,
            "triggered_at": datetime.now(timezone.utc).isoformat(),
            "manual_trigger": True,
        }
        return await self._safe_dispatch(event_type, enriched)
