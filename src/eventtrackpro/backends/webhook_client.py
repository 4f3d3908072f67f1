"""HTTP client for outbound webhook deliveries"""

import asyncio
import hashlib
import hmac
import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

import httpx

logger = logging.getLogger(__name__)

SIGNATURE_HEADER = "X-Webhook-Signature"

# Diagnostic responses are cut to this many characters
MAX_RESPONSE_CHARS = 1000


def serialize_payload(payload: Dict[str, Any]) -> bytes:
    """Serialize a payload exactly once; the signature covers these bytes"""
    return json.dumps(payload, separators=(",", ":"), default=str).encode("utf-8")


def sign_payload(secret: str, body: bytes) -> str:
    """Hex-encoded HMAC-SHA256 of the serialized body"""
    return hmac.new(secret.encode("utf-8"), body, hashlib.sha256).hexdigest()


def verify_signature(secret: str, body: bytes, signature: str) -> bool:
    return hmac.compare_digest(sign_payload(secret, body), signature or "")


def build_headers(body: bytes, secret: Optional[str] = None) -> Dict[str, str]:
    """Delivery headers, with a signature only when a non-empty secret is set"""
    headers = {"Content-Type": "application/json"}
    if secret:
        headers[SIGNATURE_HEADER] = sign_payload(secret, body)
    return headers


@dataclass
class WebhookResponse:
    """Outcome of a single POST to a subscriber"""

    status_code: Optional[int]
    text: str = ""
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.status_code is not None and (
            200 <= self.status_code < 300
        )


class WebhookClient:
    """Posts signed JSON payloads to subscriber URLs"""

    def __init__(
        self, config: dict, transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        timeout_seconds = float(config.get("webhook_timeout_seconds", 10.0))
        self.timeout = httpx.Timeout(timeout_seconds)
        # httpx times each phase separately; this bounds the whole request
        self.deadline = timeout_seconds
        # Injectable so tests can answer deliveries without a network
        self.transport = transport

    def open_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self.timeout, transport=self.transport)

    async def post(
        self,
        url: str,
        body: bytes,
        secret: Optional[str] = None,
        client: Optional[httpx.AsyncClient] = None,
    ) -> WebhookResponse:
        """
        POST a serialized payload to a subscriber.

        The whole request, body included, must finish within the configured
        timeout. Network errors and timeouts are captured in the returned
        WebhookResponse instead of being raised.

        Args:
            url: Subscriber URL
            body: Serialized JSON body from serialize_payload()
            secret: Optional signing secret
            client: Shared AsyncClient for fan-out; a fresh one is used otherwise

        Returns:
            WebhookResponse with status code and body text, or an error
        """
        headers = build_headers(body, secret)
        try:
            response = await asyncio.wait_for(
                self._send(url, body, headers, client), timeout=self.deadline
            )
        except asyncio.TimeoutError:
            logger.warning(f"Webhook delivery to {url} exceeded {self.deadline}s")
            return WebhookResponse(
                status_code=None, error=f"Timed out after {self.deadline}s"
            )
        except httpx.TimeoutException as e:
            logger.warning(f"Webhook delivery to {url} timed out: {e}")
            return WebhookResponse(status_code=None, error=f"Timed out: {e}")
        except httpx.HTTPError as e:
            logger.warning(f"Webhook delivery to {url} failed: {e}")
            return WebhookResponse(status_code=None, error=str(e) or type(e).__name__)

        return WebhookResponse(status_code=response.status_code, text=response.text)

    async def _send(
        self,
        url: str,
        body: bytes,
        headers: Dict[str, str],
        client: Optional[httpx.AsyncClient],
    ) -> httpx.Response:
        if client is not None:
            return await client.post(url, content=body, headers=headers)
        async with self.open_client() as own_client:
            return await own_client.post(url, content=body, headers=headers)
