"""RPC-style request/response facade over the orchestrator."""

from __future__ import annotations

import logging
from types import MappingProxyType
from typing import Any, Awaitable, Callable

from pydantic import BaseModel

from autopilot.adapters.base import ProviderAdapter
from autopilot.adapters.registry import AdapterRegistry
from autopilot.dispatch.orchestrator import Orchestrator
from autopilot.protocol.catalog import (
    ANALYZE_PROMPT_TOOL,
    EXECUTE_TOOL,
    LIST_CREDENTIALS_TOOL,
    RESOURCES,
    adapter_tool,
)
from autopilot.storage.credentials import CredentialStore

logger = logging.getLogger(__name__)

ToolCall = Callable[[dict[str, Any], str], Awaitable[Any]]


class RpcResponse(BaseModel):
    success: bool
    data: Any = None
    error: str | None = None


class ProtocolFacade:
    def __init__(
        self,
        orchestrator: Orchestrator,
        registry: AdapterRegistry,
        credentials: CredentialStore,
    ) -> None:
        self._orchestrator = orchestrator
        self._credentials = credentials

        tools: dict[str, ToolCall] = {
            "execute": self._execute,
            "analyze_prompt": self._analyze_prompt,
            "list_credentials": self._list_credentials,
        }
        catalog = [EXECUTE_TOOL, ANALYZE_PROMPT_TOOL, LIST_CREDENTIALS_TOOL]
        for adapter in registry.adapters():
            tools[adapter.tool] = self._direct_call(adapter)
            catalog.append(adapter_tool(adapter))

        self._tools = MappingProxyType(tools)
        self._catalog = tuple(catalog)

    async def handle_request(
        self, method: str, params: dict[str, Any] | None, user_id: str
    ) -> RpcResponse:
        params = params or {}

        if method == "tools/list":
            return RpcResponse(success=True, data={"tools": list(self._catalog)})

        if method == "resources/list":
            return RpcResponse(success=True, data={"resources": list(RESOURCES)})

        if method == "tools/call":
            name = params.get("name")
            tool = self._tools.get(name) if isinstance(name, str) else None
            if tool is None:
                return RpcResponse(success=False, error=f"Unknown tool: {name}")
            arguments = params.get("arguments") or {}
            try:
                data = await tool(arguments, user_id)
            except Exception as exc:
                logger.warning("Tool %s failed: %s", name, exc)
                return RpcResponse(success=False, error=str(exc))
            return RpcResponse(success=True, data=data)

        return RpcResponse(success=False, error=f"Unknown method: {method}")

    async def _execute(self, arguments: dict[str, Any], user_id: str) -> dict[str, Any]:
        response = await self._orchestrator.execute(user_id, str(arguments.get("prompt", "")))
        return {
            "analysis": response.analysis.model_dump(exclude_none=True),
            "result": response.result.to_dict(),
        }

    async def _analyze_prompt(self, arguments: dict[str, Any], user_id: str) -> dict[str, Any]:
        analysis = await self._orchestrator.analyze(str(arguments.get("prompt", "")))
        return {
            "analysis": analysis.model_dump(),
            "message": f"Will use {analysis.tool} to {analysis.action}",
        }

    async def _list_credentials(self, arguments: dict[str, Any], user_id: str) -> dict[str, Any]:
        credentials = await self._credentials.list(user_id)
        return {
            "credentials": [
                {**c.model_dump(mode="json"), "connected": True} for c in credentials
            ],
            "total": len(credentials),
        }

    @staticmethod
    def _direct_call(adapter: ProviderAdapter) -> ToolCall:
        async def call(arguments: dict[str, Any], user_id: str) -> dict[str, Any]:
            result = await adapter.execute(
                user_id,
                str(arguments.get("action", "")),
                arguments.get("parameters") or {},
            )
            return result.to_dict()

        return call
