"""Signature verification and fan-out for inbound hub webhooks.

Each delivery carries three headers:

- ``webhook-signature``: ``v1,<base64 HMAC-SHA256>``
- ``webhook-id``: unique message identifier
- ``webhook-timestamp``: unix timestamp of the delivery

The signed string is ``"{webhook_id}.{timestamp}.{raw_body}"``.
"""

from __future__ import annotations

import base64
import hashlib
import hmac
import json
import logging
from typing import Any, Awaitable, Callable, Mapping

from pydantic import ValidationError

from autopilot.config.settings import Settings
from autopilot.models.webhook import WebhookEvent

logger = logging.getLogger(__name__)

SIGNATURE_PREFIX = "v1,"

WebhookHandler = Callable[[dict[str, Any]], Awaitable[None]]


def compute_signature(secret: str, webhook_id: str, timestamp: str, body: str | bytes) -> str:
    raw = body.encode("utf-8") if isinstance(body, str) else body
    signing = webhook_id.encode("utf-8") + b"." + timestamp.encode("utf-8") + b"." + raw
    digest = hmac.new(secret.encode("utf-8"), signing, hashlib.sha256).digest()
    return SIGNATURE_PREFIX + base64.b64encode(digest).decode("ascii")


class WebhookReceiver:
    def __init__(self, settings: Settings) -> None:
        self._secret = settings.webhook_secret
        self._is_production = settings.is_production
        self._handlers: dict[str, list[WebhookHandler]] = {}

    def verify_signature(
        self,
        signature: str | None,
        webhook_id: str | None,
        timestamp: str | None,
        raw_body: str | bytes,
    ) -> bool:
        if not self._secret:
            if self._is_production:
                logger.error("Webhook secret not configured; rejecting in production")
                return False
            logger.warning("Webhook secret not configured; skipping verification")
            return True

        if not signature or not webhook_id or not timestamp:
            logger.error("Missing required webhook headers")
            return False

        if not signature.startswith(SIGNATURE_PREFIX):
            logger.error("Invalid signature format; must start with %s", SIGNATURE_PREFIX)
            return False

        expected = compute_signature(self._secret, webhook_id, timestamp, raw_body)
        valid = hmac.compare_digest(signature.encode("utf-8"), expected.encode("utf-8"))
        if not valid:
            logger.error("Webhook signature verification failed")
        return valid

    def on(self, event_type: str, handler: WebhookHandler) -> None:
        self._handlers.setdefault(event_type, []).append(handler)
        logger.info("Registered handler for event: %s", event_type)

    async def handle_webhook(self, payload: WebhookEvent) -> None:
        logger.info(
            "Processing webhook: %s (log_id: %s, timestamp: %s)",
            payload.type,
            payload.log_id,
            payload.timestamp,
        )
        handlers = self._handlers.get(payload.type)
        if not handlers:
            self._handle_default(payload)
            return

        for handler in handlers:
            try:
                await handler(payload.data)
            except Exception:
                logger.exception("Handler error for %s", payload.type)

    @staticmethod
    def _handle_default(payload: WebhookEvent) -> None:
        logger.info("Unhandled event type: %s", payload.type)
        logger.debug("Event data: %s", payload.data)

    def status(self) -> dict[str, Any]:
        if self._secret:
            return {"configured": True, "message": "Webhook signature verification enabled"}
        return {
            "configured": False,
            "message": (
                "Webhook secret required in production"
                if self._is_production
                else "Webhook secret not configured; verification disabled in development"
            ),
        }


class WebhookEndpoint:
    """Framework-neutral request handling for the webhook route."""

    def __init__(self, receiver: WebhookReceiver) -> None:
        self._receiver = receiver

    async def receive(
        self, headers: Mapping[str, str], raw_body: bytes | str
    ) -> tuple[int, dict[str, Any]]:
        lowered = {k.lower(): v for k, v in headers.items()}
        if not self._receiver.verify_signature(
            lowered.get("webhook-signature"),
            lowered.get("webhook-id"),
            lowered.get("webhook-timestamp"),
            raw_body,
        ):
            return 401, {"status": "error", "message": "Invalid webhook signature"}

        try:
            event = WebhookEvent.model_validate(json.loads(raw_body))
        except (ValueError, ValidationError) as exc:
            logger.error("Malformed webhook payload: %s", exc)
            return 400, {"status": "error", "message": "Malformed webhook payload"}

        await self._receiver.handle_webhook(event)
        return 200, {"status": "success"}
