"""Telegram adapter over the Bot API.

Telegram uses one process-wide bot token instead of per-user credentials, so
the token comes from settings and is embedded in the URL path.
"""

from __future__ import annotations

from typing import Any

import httpx

from autopilot.adapters.base import ProviderAdapter, remote_error, response_payload
from autopilot.models.action import ActionResult, ErrorCategory, ToolName
from autopilot.models.credential import Tokens

TELEGRAM_API = "https://api.telegram.org"


class TelegramAdapter(ProviderAdapter):
    tool = ToolName.TELEGRAM.value
    provider_key = "telegram"
    display_name = "Telegram"
    actions = {
        "send_message": ("chatId", "message"),
    }

    def __init__(self, bot_token: str, http: httpx.AsyncClient) -> None:
        super().__init__(credentials=None, http=http)
        self._bot_token = bot_token

    async def _resolve_tokens(self, user_id: str) -> Tokens | None:
        return Tokens(access_token=self._bot_token) if self._bot_token else None

    def _not_connected(self) -> ActionResult:
        return ActionResult.fail(
            "Telegram not connected: bot token is not configured "
            "(set AUTOPILOT_TELEGRAM_BOT_TOKEN).",
            ErrorCategory.CONFIGURATION,
        )

    async def _send_message(self, tokens: Tokens, params: dict[str, Any]) -> ActionResult:
        response = await self._http.post(
            f"{TELEGRAM_API}/bot{tokens.access_token}/sendMessage",
            json={
                "chat_id": params["chatId"],
                "text": params["message"],
                "parse_mode": "HTML",
            },
        )
        data = response_payload(response)
        if not data.get("ok"):
            return ActionResult.fail(remote_error(data, "Failed to send message"))
        return ActionResult.ok(
            "Telegram message sent",
            message_id=(data.get("result") or {}).get("message_id"),
        )
