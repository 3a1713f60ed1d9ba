"""Static tool and resource catalog advertised over the RPC surface."""

from __future__ import annotations

from typing import Any

from autopilot.adapters.base import ProviderAdapter

EXECUTE_TOOL: dict[str, Any] = {
    "name": "execute",
    "description": (
        "Execute an automation described in natural language. Supports Gmail, "
        "Slack, Google Sheets, Telegram directly and 150+ integrations via the hub."
    ),
    "inputSchema": {
        "type": "object",
        "properties": {
            "prompt": {
                "type": "string",
                "description": "The automation request in natural language",
            },
        },
        "required": ["prompt"],
    },
}

ANALYZE_PROMPT_TOOL: dict[str, Any] = {
    "name": "analyze_prompt",
    "description": "Analyze a prompt without executing; useful for preview",
    "inputSchema": {
        "type": "object",
        "properties": {
            "prompt": {"type": "string", "description": "The automation request to analyze"},
        },
        "required": ["prompt"],
    },
}

LIST_CREDENTIALS_TOOL: dict[str, Any] = {
    "name": "list_credentials",
    "description": "List the user's connected services",
    "inputSchema": {"type": "object", "properties": {}},
}

RESOURCES: list[dict[str, Any]] = [
    {
        "uri": "hub://integrations",
        "name": "Available Integrations",
        "description": "150+ integrations available via the integration hub",
        "mimeType": "application/json",
    },
]


def adapter_tool(adapter: ProviderAdapter) -> dict[str, Any]:
    """Describe a direct adapter as a callable tool."""
    return {
        "name": adapter.tool,
        "description": f"Call {adapter.display_name} directly with a structured action",
        "inputSchema": {
            "type": "object",
            "properties": {
                "action": {"type": "string", "enum": sorted(adapter.actions)},
                "parameters": {"type": "object"},
            },
            "required": ["action"],
        },
    }
