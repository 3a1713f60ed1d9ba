"""Integration-hub adapter: remote execution and hub-mediated connections."""

from __future__ import annotations

import asyncio
import logging
from typing import Any
from urllib.parse import urlencode

import httpx
from pydantic import BaseModel, Field

from autopilot.adapters.base import remote_error, response_payload
from autopilot.config.settings import Settings
from autopilot.exceptions import (
    ConfigurationError,
    ConnectionFailedError,
    ConnectionTimeoutError,
    HubError,
)
from autopilot.hub.mapping import action_key, hub_input
from autopilot.models.action import ActionResult, ErrorCategory
from autopilot.models.connection import (
    ConnectionPoll,
    ConnectionStatus,
    InitiatedConnection,
)
from autopilot.storage.connections import ConnectionStore

logger = logging.getLogger(__name__)

AUTH_REQUIRED_CODES = frozenset({"auth_required", "connection_not_found"})
AUTH_REQUIRED_STATUSES = frozenset({401, 403})
CONNECTION_STATUS_EVENT = "connection_status_changed"

AVAILABLE_PLATFORMS = [
    "gmail",
    "slack",
    "google-sheets",
    "google-drive",
    "notion",
    "telegram",
    "discord",
    "twitter",
    "linkedin",
    "hubspot",
    "salesforce",
]


class HubAction(BaseModel):
    platform: str
    action: str
    params: dict[str, Any] = Field(default_factory=dict)
    connection_key: str | None = None


def _parse_status(raw: Any) -> ConnectionStatus:
    try:
        return ConnectionStatus(str(raw).upper())
    except ValueError:
        # INITIATED, INITIALIZING and friends are still pending
        return ConnectionStatus.PENDING


class IntegrationHubAdapter:
    """One authenticated REST surface for every hub-proxied toolkit.

    The hub secret is system-wide; users are told apart by ``connectionKey``.
    """

    def __init__(
        self,
        settings: Settings,
        http: httpx.AsyncClient,
        connections: ConnectionStore | None = None,
    ) -> None:
        self._settings = settings
        self._http = http
        self._connections = connections
        self._base_url = settings.hub_base_url.rstrip("/")
        if not settings.hub_api_key:
            logger.warning("Hub API key not set; hub integrations will not work")

    @property
    def is_configured(self) -> bool:
        return bool(self._settings.hub_api_key)

    def _headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self._settings.hub_api_key}"}

    def _require_key(self) -> None:
        if not self.is_configured:
            raise ConfigurationError("Hub API key is not configured")

    async def execute_action(self, action: HubAction, user_id: str) -> ActionResult:
        if not self.is_configured:
            return ActionResult.fail(
                "Hub API key not configured. Set AUTOPILOT_HUB_API_KEY.",
                ErrorCategory.CONFIGURATION,
            )

        fallback = f"Failed to execute {action.action} on {action.platform}"
        body = {
            "actionKey": action_key(action.platform, action.action),
            "connectionKey": action.connection_key or user_id,
            "input": hub_input(action.action, action.params),
        }
        try:
            response = await self._http.post(
                f"{self._base_url}/actions/execute",
                headers=self._headers(),
                json=body,
            )
        except httpx.HTTPError as exc:
            logger.warning("Hub call %s failed: %s", body["actionKey"], exc)
            return ActionResult.fail(str(exc) or fallback, ErrorCategory.TRANSPORT)

        data = response_payload(response)
        if response.is_success:
            return ActionResult.ok(
                f"{action.action} executed successfully on {action.platform}",
                data=data,
            )

        category = (
            ErrorCategory.AUTH_REQUIRED
            if data.get("code") in AUTH_REQUIRED_CODES
            or response.status_code in AUTH_REQUIRED_STATUSES
            else ErrorCategory.EXECUTION_FAILURE
        )
        return ActionResult.fail(remote_error(data, fallback), category)

    async def list_connections(self, user_id: str) -> list[dict[str, Any]]:
        self._require_key()
        response = await self._request("GET", "/connections", params={"userId": user_id})
        connections = response_payload(response).get("connections")
        return connections if isinstance(connections, list) else []

    async def initiate_connection(
        self,
        user_id: str,
        auth_config_id: str,
        toolkit_name: str,
        callback_url: str | None = None,
    ) -> InitiatedConnection:
        """Start a hosted OAuth flow and record the connection as PENDING."""
        if not auth_config_id:
            raise HubError("auth_config_id is required")
        self._require_key()

        redirect = callback_url or f"{self._settings.frontend_url}/credentials?hub_callback=true"
        response = await self._request(
            "POST",
            "/connections",
            json={
                "authConfigId": auth_config_id,
                "userId": user_id,
                "toolkit": toolkit_name,
                "redirectUri": redirect,
            },
        )
        data = response_payload(response)
        connection_id = data.get("connectionId") or data.get("id")
        if not connection_id:
            raise HubError("Hub did not return a connection id")

        if self._connections is not None:
            await self._connections.upsert(
                user_id,
                str(connection_id),
                auth_config_id,
                toolkit_name,
                ConnectionStatus.PENDING,
            )
        logger.info("Initiated %s connection %s for user %s", toolkit_name, connection_id, user_id)
        return InitiatedConnection(
            redirect_url=data.get("redirectUrl") or "",
            connection_id=str(connection_id),
            toolkit=toolkit_name,
        )

    async def get_connection(self, connection_id: str) -> dict[str, Any]:
        self._require_key()
        response = await self._request("GET", f"/connections/{connection_id}")
        return response_payload(response)

    async def delete_connection(self, connection_id: str, user_id: str | None = None) -> None:
        self._require_key()
        await self._request("DELETE", f"/connections/{connection_id}")
        if self._connections is not None and user_id is not None:
            await self._connections.delete(user_id, connection_id)
        logger.info("Deleted connection %s", connection_id)

    async def poll_connection(self, connection_id: str) -> ConnectionPoll:
        """Observe the connection once; an unknown id is still pending."""
        self._require_key()
        try:
            response = await self._http.get(
                f"{self._base_url}/connections/{connection_id}",
                headers=self._headers(),
            )
        except httpx.HTTPError as exc:
            raise HubError(f"Hub request failed: {exc}") from exc

        if response.status_code == 404:
            return ConnectionPoll(
                connection_id=connection_id,
                status=ConnectionStatus.PENDING,
                reason="not found yet",
            )
        data = response_payload(response)
        if not response.is_success:
            raise HubError(
                remote_error(data, "Failed to read connection"),
                status_code=response.status_code,
            )
        status = _parse_status(data.get("status"))
        return ConnectionPoll(
            connection_id=connection_id,
            status=status,
            reason=str(data.get("statusReason") or ""),
            account=data,
        )

    async def wait_for_connection(
        self,
        connection_id: str,
        timeout_seconds: float = 60,
        poll_interval: float = 2.0,
    ) -> ConnectionPoll:
        loop = asyncio.get_running_loop()
        deadline = loop.time() + timeout_seconds

        while loop.time() < deadline:
            poll = await self.poll_connection(connection_id)
            if poll.is_active or poll.is_terminal:
                await self._record_status(connection_id, poll.status)
            if poll.is_active:
                return poll
            if poll.is_terminal:
                raise ConnectionFailedError(connection_id, poll.status.value)
            await asyncio.sleep(poll_interval)

        raise ConnectionTimeoutError(connection_id, timeout_seconds)

    async def handle_connection_event(self, data: dict[str, Any]) -> None:
        """Webhook handler that applies pushed connection status changes."""
        connection_id = data.get("connectionId") or data.get("id")
        if not connection_id or "status" not in data:
            logger.warning("Connection event without id or status: %s", sorted(data))
            return
        await self._record_status(str(connection_id), _parse_status(data["status"]))

    async def _record_status(self, connection_id: str, status: ConnectionStatus) -> None:
        if self._connections is not None:
            await self._connections.update_status(connection_id, status)

    def connection_link(self, platform: str, user_id: str) -> str:
        query = urlencode(
            {"userId": user_id, "redirectUrl": f"{self._settings.frontend_url}/credentials"}
        )
        return f"{self._settings.hub_connect_url.rstrip('/')}/{platform}?{query}"

    async def generate_authkit_token(self, user_id: str, user_email: str) -> dict[str, Any]:
        """Short-lived token for the hub's hosted connect widget."""
        self._require_key()
        response = await self._request(
            "POST", "/authkit/token", json={"userId": user_id, "userEmail": user_email}
        )
        return response_payload(response)

    def available_platforms(self) -> list[str]:
        return list(AVAILABLE_PLATFORMS)

    async def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        try:
            response = await self._http.request(
                method, f"{self._base_url}{path}", headers=self._headers(), **kwargs
            )
        except httpx.HTTPError as exc:
            raise HubError(f"Hub request failed: {exc}") from exc
        if not response.is_success:
            raise HubError(
                remote_error(response_payload(response), f"Hub {method} {path} failed"),
                status_code=response.status_code,
            )
        return response
