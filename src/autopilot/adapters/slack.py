"""Slack adapter over the Slack Web API."""

from __future__ import annotations

from typing import Any

from autopilot.adapters.base import ProviderAdapter, remote_error, response_payload
from autopilot.models.action import ActionResult, ToolName
from autopilot.models.credential import Tokens

SLACK_API = "https://slack.com/api"
CHANNEL_PAGE_SIZE = 20


class SlackAdapter(ProviderAdapter):
    tool = ToolName.SLACK.value
    provider_key = "slack"
    display_name = "Slack"
    actions = {
        "send_message": ("channel", "message"),
        "list_channels": (),
    }

    # Slack answers HTTP 200 with {"ok": false} on most failures.

    async def _send_message(self, tokens: Tokens, params: dict[str, Any]) -> ActionResult:
        channel = params["channel"]
        response = await self._http.post(
            f"{SLACK_API}/chat.postMessage",
            headers=self._bearer(tokens),
            json={"channel": channel, "text": params["message"]},
        )
        data = response_payload(response)
        if not data.get("ok"):
            return ActionResult.fail(remote_error(data, "Failed to send message"))
        return ActionResult.ok(f"Message sent to #{channel}", ts=data.get("ts"))

    async def _list_channels(self, tokens: Tokens, params: dict[str, Any]) -> ActionResult:
        response = await self._http.get(
            f"{SLACK_API}/conversations.list",
            headers=self._bearer(tokens),
            params={"limit": CHANNEL_PAGE_SIZE},
        )
        data = response_payload(response)
        if not data.get("ok"):
            return ActionResult.fail(remote_error(data, "Failed to list channels"))

        channels = [
            {"id": c.get("id"), "name": c.get("name"), "memberCount": c.get("num_members")}
            for c in (data.get("channels") or [])[:CHANNEL_PAGE_SIZE]
        ]
        return ActionResult.ok(f"Found {len(channels)} channels", channels=channels)
