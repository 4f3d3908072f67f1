"""Webhook dispatch - fan a payload out to every matching subscription.

Deliveries for one trigger run concurrently under a semaphore, each with its
own timeout. A failed delivery is logged and dropped: there is no retry and
no durable queue. The trigger counts as delivered when at least one
subscriber accepted it.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import httpx

from eventtrackpro.backends.webhook_client import (
    MAX_RESPONSE_CHARS,
    WebhookClient,
    serialize_payload,
)
from eventtrackpro.models.webhook import Webhook
from eventtrackpro.services.webhook_service import WebhookService

logger = logging.getLogger(__name__)


@dataclass
class DeliveryResult:
    """Outcome of delivering one payload to one subscriber"""

    webhook_id: Optional[int]
    webhook_name: str
    url: str
    success: bool
    status_code: Optional[int] = None
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class DispatchResult:
    """Per-subscriber outcomes for one trigger"""

    event_type: str
    deliveries: List[DeliveryResult] = field(default_factory=list)

    @property
    def triggered(self) -> bool:
        """True iff at least one delivery succeeded"""
        return any(d.success for d in self.deliveries)

    @property
    def all_failed(self) -> bool:
        return bool(self.deliveries) and not self.triggered

    @property
    def partial_failure(self) -> bool:
        return self.triggered and any(not d.success for d in self.deliveries)

    @property
    def message(self) -> str:
        if self.triggered:
            return "Webhook triggered successfully"
        return "No webhooks were triggered"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "event_type": self.event_type,
            "triggered": self.triggered,
            "deliveries": [d.to_dict() for d in self.deliveries],
        }


class WebhookDispatcher:
    """Delivers payloads to the active subscribers of an event type"""

    def __init__(
        self,
        webhook_service: WebhookService,
        webhook_client: WebhookClient,
        max_concurrency: int = 10,
    ):
        self.webhook_service = webhook_service
        self.webhook_client = webhook_client
        self.max_concurrency = max(1, max_concurrency)

    async def dispatch(
        self, event_type: str, payload: Dict[str, Any]
    ) -> DispatchResult:
        """
        Deliver a payload to every active webhook subscribed to event_type.

        Args:
            event_type: One of the WebhookEventType values
            payload: Flat payload map; serialized once and shared by all deliveries

        Returns:
            DispatchResult with one DeliveryResult per subscriber. An empty
            subscriber list is not an error, it simply yields no deliveries.
        """
        event_type = getattr(event_type, "value", event_type)
        subscribers = self.webhook_service.find_active_subscribers(event_type)
        result = DispatchResult(event_type=event_type)

        if not subscribers:
            logger.info(f"No active webhooks subscribed to {event_type}")
            return result

        body = serialize_payload(payload)
        semaphore = asyncio.Semaphore(self.max_concurrency)

        logger.info(f"Dispatching {event_type} to {len(subscribers)} webhook(s)")

        async with self.webhook_client.open_client() as client:
            deliveries = await asyncio.gather(
                *(
                    self._deliver(webhook, body, client, semaphore)
                    for webhook in subscribers
                )
            )

        result.deliveries = list(deliveries)
        failed = [d for d in result.deliveries if not d.success]
        if failed:
            logger.warning(
                f"{len(failed)} of {len(result.deliveries)} {event_type} deliveries failed"
            )
        return result

    async def _deliver(
        self,
        webhook: Webhook,
        body: bytes,
        client: httpx.AsyncClient,
        semaphore: asyncio.Semaphore,
    ) -> DeliveryResult:
        async with semaphore:
            try:
                response = await self.webhook_client.post(
                    webhook.url, body, secret=webhook.secret, client=client
                )
            except Exception as e:
                # Contain anything the client did not already capture
                logger.error(
                    f"Unexpected error delivering to webhook {webhook.id}: {e}"
                )
                return DeliveryResult(
                    webhook_id=webhook.id,
                    webhook_name=webhook.name,
                    url=webhook.url,
                    success=False,
                    error=str(e),
                )

        if response.ok:
            logger.info(f"Webhook {webhook.id} delivered ({response.status_code})")
            error = None
        else:
            error = response.error or f"Subscriber responded with {response.status_code}"
            logger.warning(f"Failed to trigger webhook {webhook.id}: {error}")

        return DeliveryResult(
            webhook_id=webhook.id,
            webhook_name=webhook.name,
            url=webhook.url,
            success=response.ok,
            status_code=response.status_code,
            error=error,
        )

    async def send_test(
        self, webhook: Webhook, event_type: str, data: Dict[str, Any]
    ) -> Dict[str, Any]:
        """
        Deliver a single test payload to one webhook, bypassing the registry.

        Args:
            webhook: Target webhook
            event_type: Event type recorded in the test payload
            data: Caller-supplied payload fields

        Returns:
            Diagnostic dict with success, status_code, the response body
            (truncated) or an error, and the webhook's id, name and url
        """
        payload = {
            "event_type": getattr(event_type, "value", event_type),
            "test": True,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            **data,
        }
        body = serialize_payload(payload)
        response = await self.webhook_client.post(
            webhook.url, body, secret=webhook.secret
        )
        webhook_info = {"id": webhook.id, "name": webhook.name, "url": webhook.url}

        if response.error is not None:
            return {
                "success": False,
                "error": f"Failed to send webhook: {response.error}",
                "webhook": webhook_info,
            }

        return {
            "success": response.ok,
            "status_code": response.status_code,
            "response": response.text[:MAX_RESPONSE_CHARS],
            "webhook": webhook_info,
        }
