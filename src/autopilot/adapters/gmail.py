"""Gmail adapter over the Gmail v1 REST API."""

from __future__ import annotations

import asyncio
import base64
import logging
from typing import Any

from autopilot.adapters.base import ProviderAdapter, remote_error, response_payload
from autopilot.models.action import ActionResult, ToolName
from autopilot.models.credential import Tokens

logger = logging.getLogger(__name__)

GMAIL_API = "https://gmail.googleapis.com/gmail/v1/users/me"
METADATA_LIMIT = 5
DEFAULT_MAX_RESULTS = 10


def build_raw_message(to: str, subject: str, body: str) -> str:
    """RFC 2822 message, base64url-encoded as Gmail's ``raw`` field expects."""
    email = "\r\n".join(
        [
            f"To: {to}",
            f"Subject: {subject}",
            "Content-Type: text/plain; charset=utf-8",
            "",
            body,
        ]
    )
    return base64.urlsafe_b64encode(email.encode("utf-8")).decode("ascii").rstrip("=")


class GmailAdapter(ProviderAdapter):
    tool = ToolName.GMAIL.value
    provider_key = "gmail"
    display_name = "Gmail"
    actions = {
        "send_email": ("to", "subject", "body"),
        "read_emails": (),
        "search_emails": (),
    }

    async def _send_email(self, tokens: Tokens, params: dict[str, Any]) -> ActionResult:
        to = params["to"]
        raw = build_raw_message(to, params["subject"], params["body"])
        response = await self._http.post(
            f"{GMAIL_API}/messages/send",
            headers=self._bearer(tokens),
            json={"raw": raw},
        )
        data = response_payload(response)
        if not response.is_success:
            return ActionResult.fail(remote_error(data, "Failed to send email"))
        return ActionResult.ok(
            f"Email sent successfully to {to}", message_id=data.get("id")
        )

    async def _read_emails(self, tokens: Tokens, params: dict[str, Any]) -> ActionResult:
        max_results = params.get("maxResults") or DEFAULT_MAX_RESULTS
        response = await self._http.get(
            f"{GMAIL_API}/messages",
            headers=self._bearer(tokens),
            params={"maxResults": max_results},
        )
        data = response_payload(response)
        if not response.is_success:
            return ActionResult.fail(remote_error(data, "Failed to fetch emails"))

        listed = data.get("messages") or []
        ids = [m["id"] for m in listed[:METADATA_LIMIT]]
        fetched = await asyncio.gather(*(self._message_metadata(tokens, i) for i in ids))
        return ActionResult.ok(
            f"Found {len(listed)} emails",
            emails=[m for m in fetched if m is not None],
        )

    async def _message_metadata(
        self, tokens: Tokens, message_id: str
    ) -> dict[str, Any] | None:
        response = await self._http.get(
            f"{GMAIL_API}/messages/{message_id}",
            headers=self._bearer(tokens),
            params={"format": "metadata"},
        )
        if not response.is_success:
            logger.warning(
                "Skipping metadata for message %s: HTTP %s", message_id, response.status_code
            )
            return None
        headers = (response_payload(response).get("payload") or {}).get("headers") or []

        def header(name: str) -> str | None:
            return next((h.get("value") for h in headers if h.get("name") == name), None)

        return {
            "id": message_id,
            "from": header("From"),
            "subject": header("Subject"),
            "date": header("Date"),
        }

    async def _search_emails(self, tokens: Tokens, params: dict[str, Any]) -> ActionResult:
        query = params.get("query") or ""
        max_results = params.get("maxResults") or DEFAULT_MAX_RESULTS
        response = await self._http.get(
            f"{GMAIL_API}/messages",
            headers=self._bearer(tokens),
            params={"q": query, "maxResults": max_results},
        )
        data = response_payload(response)
        if not response.is_success:
            return ActionResult.fail(remote_error(data, "Failed to search emails"))

        count = len(data.get("messages") or [])
        return ActionResult.ok(
            f'Found {count} emails matching "{query}"', count=count
        )
