"""Abstract base for provider adapters."""

from __future__ import annotations

import abc
import logging
from typing import Any, Awaitable, Callable, ClassVar, Mapping

import httpx

from autopilot.models.action import ActionResult, ErrorCategory
from autopilot.models.credential import Tokens
from autopilot.storage.credentials import CredentialStore

logger = logging.getLogger(__name__)

ActionHandler = Callable[[Tokens, dict[str, Any]], Awaitable[ActionResult]]


def missing_parameters(parameters: Mapping[str, Any], required: tuple[str, ...]) -> list[str]:
    missing: list[str] = []
    for name in required:
        value = parameters.get(name)
        if value is None or (isinstance(value, str) and not value.strip()):
            missing.append(name)
        elif isinstance(value, (list, dict)) and not value:
            missing.append(name)
    return missing


def response_payload(response: httpx.Response) -> dict[str, Any]:
    """Decode a JSON object body, or ``{}`` when the body is not one."""
    try:
        data = response.json()
    except ValueError:
        return {}
    return data if isinstance(data, dict) else {}


def remote_error(data: Mapping[str, Any], fallback: str) -> str:
    """The provider's own error message when the body carries one."""
    error = data.get("error")
    if isinstance(error, dict):
        error = error.get("message")
    for candidate in (error, data.get("description"), data.get("message")):
        if isinstance(candidate, str) and candidate:
            return candidate
    return fallback


class ProviderAdapter(abc.ABC):
    """Uniform ``execute`` contract over one provider's REST API.

    Subclasses declare ``actions`` (action name to required parameters) and
    implement one ``_<action>`` coroutine per entry. ``execute`` never raises:
    every failure comes back as ``ActionResult(success=False)``.
    """

    tool: ClassVar[str]
    provider_key: ClassVar[str]
    display_name: ClassVar[str]
    actions: ClassVar[Mapping[str, tuple[str, ...]]]

    def __init__(self, credentials: CredentialStore | None, http: httpx.AsyncClient) -> None:
        self._credentials = credentials
        self._http = http

    async def _resolve_tokens(self, user_id: str) -> Tokens | None:
        if self._credentials is None:
            return None
        return await self._credentials.get(user_id, self.provider_key)

    def _not_connected(self) -> ActionResult:
        return ActionResult.fail(
            f"{self.display_name} not connected. Please connect {self.display_name} "
            "first in the Credentials page.",
            ErrorCategory.NOT_CONNECTED,
        )

    async def execute(
        self, user_id: str, action: str, parameters: Mapping[str, Any] | None = None
    ) -> ActionResult:
        params = dict(parameters or {})
        try:
            tokens = await self._resolve_tokens(user_id)
            if tokens is None:
                return self._not_connected()

            required = self.actions.get(action)
            if required is None:
                return ActionResult.fail(
                    f"Unknown action: {action}", ErrorCategory.UNKNOWN_ACTION
                )

            missing = missing_parameters(params, required)
            if missing:
                return ActionResult.fail(
                    f"Missing required parameters: {', '.join(missing)}",
                    ErrorCategory.MISSING_PARAMETERS,
                )

            handler: ActionHandler = getattr(self, f"_{action}")
            return await handler(tokens, params)
        except Exception as exc:
            logger.warning("%s.%s failed: %s", self.tool, action, exc)
            return ActionResult.fail(
                str(exc) or exc.__class__.__name__, ErrorCategory.TRANSPORT
            )

    @staticmethod
    def _bearer(tokens: Tokens) -> dict[str, str]:
        return {"Authorization": f"Bearer {tokens.access_token}"}
