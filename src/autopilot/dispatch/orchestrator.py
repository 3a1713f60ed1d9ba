"""Orchestrator: prompt -> analysis -> routing -> adapter or hub -> envelope."""

from __future__ import annotations

import logging

from autopilot.adapters.registry import AdapterRegistry
from autopilot.analyzer.prompt_analyzer import PromptAnalyzer
from autopilot.hub.adapter import HubAction, IntegrationHubAdapter
from autopilot.hub.mapping import to_hub
from autopilot.models.action import (
    ActionRequest,
    ActionResult,
    AnalysisSummary,
    DispatchResponse,
    DispatchStrategy,
    ErrorCategory,
)
from autopilot.storage.executions import ExecutionLog

logger = logging.getLogger(__name__)


class Orchestrator:
    """Routes analyzed requests to a direct adapter or the integration hub.

    In a ``direct`` deployment a registered adapter for the tool always wins
    and the hub only handles tools without one. In a ``hub`` deployment every
    request goes through the hub.
    """

    def __init__(
        self,
        analyzer: PromptAnalyzer,
        registry: AdapterRegistry,
        hub: IntegrationHubAdapter | None = None,
        strategy: DispatchStrategy = DispatchStrategy.DIRECT,
        history: ExecutionLog | None = None,
    ) -> None:
        self._analyzer = analyzer
        self._registry = registry
        self._hub = hub
        self._strategy = strategy
        self._history = history

    async def analyze(self, prompt: str) -> ActionRequest:
        return await self._analyzer.analyze(prompt)

    def select_strategy(self, tool: str) -> DispatchStrategy | None:
        if self._strategy == DispatchStrategy.DIRECT and tool in self._registry:
            return DispatchStrategy.DIRECT
        if self._hub is not None:
            return DispatchStrategy.HUB
        return None

    async def execute(self, user_id: str, prompt: str) -> DispatchResponse:
        request = await self._analyzer.analyze(prompt)
        response = await self.dispatch(user_id, request)
        if self._history is not None:
            await self._history.record(user_id, prompt, response)
        return response

    async def dispatch(self, user_id: str, request: ActionRequest) -> DispatchResponse:
        summary = AnalysisSummary(
            intent=request.intent, tool=request.tool, action=request.action
        )
        adapter = (
            self._registry.get(request.tool)
            if self._strategy == DispatchStrategy.DIRECT
            else None
        )

        if adapter is not None:
            strategy = DispatchStrategy.DIRECT
            result = await adapter.execute(user_id, request.action, request.parameters)
        elif self._hub is not None:
            strategy = DispatchStrategy.HUB
            platform, hub_action = to_hub(request.tool, request.action)
            summary.hub_platform = platform
            summary.hub_action = hub_action
            result = await self._hub.execute_action(
                HubAction(platform=platform, action=hub_action, params=request.parameters),
                user_id,
            )
        else:
            strategy = DispatchStrategy.DIRECT
            result = ActionResult.fail(
                f"Unknown tool: {request.tool}. Available tools: "
                f"{', '.join(self._registry.tools())}",
                ErrorCategory.UNKNOWN_TOOL,
            )

        logger.info(
            "Dispatched %s.%s via %s (success=%s)",
            request.tool,
            request.action,
            strategy.value,
            result.success,
        )
        return DispatchResponse(
            request_id=request.id,
            analysis=summary,
            result=result,
            strategy=strategy,
        )
