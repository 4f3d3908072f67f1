"""Webhook Service - Handles webhook subscription database operations"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from sqlmodel import Session, select

from eventtrackpro.models.webhook import Webhook

logger = logging.getLogger(__name__)

_UPDATABLE_FIELDS = ("name", "url", "secret", "events", "active")


class WebhookService:
    """Registry of webhook subscriptions"""

    def __init__(self, db_session: Session):
        self.db = db_session

    def list_webhooks(self) -> List[Webhook]:
        """Get all webhooks, oldest first"""
        statement = select(Webhook).order_by(Webhook.id)
        return list(self.db.exec(statement).all())

    def get_webhook(self, webhook_id: int) -> Optional[Webhook]:
        """Get a webhook by ID"""
        return self.db.get(Webhook, webhook_id)

    def create_webhook(self, data: Dict[str, Any]) -> Webhook:
        """
        Create a new webhook subscription

        Args:
            data: name, url, optional secret, events list and active flag

        Returns:
            The created Webhook with its server-assigned creation timestamp
        """
        webhook = Webhook(
            name=data["name"],
            url=data["url"],
            secret=data.get("secret") or None,
            events=list(data.get("events") or []),
            active=data.get("active", True),
            created_at=datetime.now(timezone.utc),
        )
        try:
            self.db.add(webhook)
            self.db.commit()
            self.db.refresh(webhook)
        except Exception as e:
            self.db.rollback()
            logger.error(f"Error creating webhook: {e}")
            raise

        logger.info(f"Created webhook {webhook.id} for events {webhook.events}")
        return webhook

    def update_webhook(
        self, webhook_id: int, updates: Dict[str, Any]
    ) -> Optional[Webhook]:
        """
        Partially update a webhook; only supplied fields change

        Args:
            webhook_id: ID of the webhook to update
            updates: Subset of name, url, secret, events, active

        Returns:
            The updated Webhook, or None if it does not exist
        """
        webhook = self.db.get(Webhook, webhook_id)
        if not webhook:
            return None

        for field_name in _UPDATABLE_FIELDS:
            if field_name not in updates:
                continue
            value = updates[field_name]
            if field_name == "events":
                # Reassign so the JSON column is flagged as modified
                value = list(value)
            setattr(webhook, field_name, value)

        try:
            self.db.add(webhook)
            self.db.commit()
            self.db.refresh(webhook)
        except Exception as e:
            self.db.rollback()
            logger.error(f"Error updating webhook {webhook_id}: {e}")
            raise

        logger.info(f"Updated webhook {webhook_id}")
        return webhook

    def delete_webhook(self, webhook_id: int) -> bool:
        """Hard delete a webhook; returns False if it does not exist"""
        webhook = self.db.get(Webhook, webhook_id)
        if not webhook:
            return False

        try:
            self.db.delete(webhook)
            self.db.commit()
        except Exception as e:
            self.db.rollback()
            logger.error(f"Error deleting webhook {webhook_id}: {e}")
            raise

        logger.info(f"Deleted webhook {webhook_id}")
        return True

    def find_active_subscribers(self, event_type: str) -> List[Webhook]:
        """
        Active webhooks subscribed to an event type

        The events list is a JSON column, so membership is checked in Python
        rather than with a backend-specific JSON operator.

        Args:
            event_type: One of the WebhookEventType values

        Returns:
            Webhooks where active is true and event_type is subscribed
        """
        statement = select(Webhook).where(Webhook.active == True).order_by(Webhook.id)
        active = self.db.exec(statement).all()
        return [webhook for webhook in active if webhook.is_subscribed_to(event_type)]
