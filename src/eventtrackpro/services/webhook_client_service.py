"""Centralized webhook HTTP client for the application"""

import logging

from eventtrackpro.backends.webhook_client import WebhookClient
from eventtrackpro.config import config

logger = logging.getLogger(__name__)

# Global webhook client instance
_webhook_client = None


def get_webhook_client() -> WebhookClient:
    """Get or create the global webhook client instance"""
    global _webhook_client
    if _webhook_client is None:
        _webhook_client = WebhookClient(config)
        logger.info("Initialized global webhook client")
    return _webhook_client
