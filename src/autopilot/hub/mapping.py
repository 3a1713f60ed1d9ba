"""Translation from canonical tool/action names to the hub's vocabulary.

Pairs without an entry pass through unchanged so hub-native integrations
work without a code change.
"""

from __future__ import annotations

from typing import Any

PLATFORM_MAP: dict[str, str] = {
    "gmail": "gmail",
    "slack": "slack",
    "sheets": "google-sheets",
    "drive": "google-drive",
    "telegram": "telegram",
    "notion": "notion",
    "discord": "discord",
}

ACTION_MAP: dict[str, dict[str, str]] = {
    "gmail": {
        "send_email": "send-email",
        "read_emails": "list-messages",
        "search_emails": "search-messages",
    },
    "slack": {
        "send_message": "post-message",
        "list_channels": "list-conversations",
    },
    "sheets": {
        "read_sheet": "get-values",
        "append_row": "append-values",
    },
    "telegram": {
        "send_message": "send-message",
    },
}


def to_hub(tool: str, action: str) -> tuple[str, str]:
    platform = PLATFORM_MAP.get(tool, tool)
    hub_action = ACTION_MAP.get(tool, {}).get(action, action)
    return platform, hub_action


def action_key(platform: str, action: str) -> str:
    return f"{platform}::{action}"


def hub_input(action: str, params: dict[str, Any]) -> dict[str, Any]:
    """Shape canonical parameters the way the hub action expects them."""
    shaped = dict(params)
    if action == "append-values":
        values = shaped.get("values")
        if values is not None and not (
            isinstance(values, list) and values and all(isinstance(v, list) for v in values)
        ):
            shaped["values"] = [values if isinstance(values, list) else [values]]
    return shaped
