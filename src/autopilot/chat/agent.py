"""Chat-facing agent: one reply per request, or a streamed conversation."""

from __future__ import annotations

import logging
from typing import AsyncIterator, Literal

from openai import AsyncOpenAI
from pydantic import BaseModel

from autopilot.chat.formatter import format_outcome
from autopilot.config.settings import Settings
from autopilot.dispatch.orchestrator import Orchestrator
from autopilot.exceptions import AuthRequiredError, MalformedAnalysisError
from autopilot.models.action import ActionResult, AnalysisSummary, ErrorCategory

logger = logging.getLogger(__name__)


class ChatMessage(BaseModel):
    role: Literal["user", "assistant", "system"]
    content: str


class ChatReply(BaseModel):
    text: str
    analysis: AnalysisSummary
    result: ActionResult


class StreamChunk(BaseModel):
    type: Literal["text", "error", "done"]
    content: str | None = None
    error: str | None = None


def latest_user_message(messages: list[ChatMessage]) -> str:
    for message in reversed(messages):
        if message.role == "user" and message.content.strip():
            return message.content
    raise MalformedAnalysisError("Messages are required")


class ChatAgent:
    def __init__(
        self,
        settings: Settings,
        orchestrator: Orchestrator,
        client: AsyncOpenAI | None = None,
    ) -> None:
        self._settings = settings
        self._orchestrator = orchestrator
        self._client = client or AsyncOpenAI(
            api_key=settings.openai_api_key,
            max_retries=settings.llm_max_retries,
        )

    async def reply(self, user_id: str, messages: list[ChatMessage]) -> ChatReply:
        """Dispatch the latest user message and describe the outcome.

        Raises :class:`AuthRequiredError` when the hub reports that the user
        must connect the toolkit first, so callers can start a connect flow.
        """
        prompt = latest_user_message(messages)
        response = await self._orchestrator.execute(user_id, prompt)

        if response.result.error_category == ErrorCategory.AUTH_REQUIRED:
            raise AuthRequiredError(
                response.result.error or "Authentication required",
                toolkit=response.analysis.hub_platform or response.analysis.tool,
            )

        return ChatReply(
            text=format_outcome(response.analysis, response.result),
            analysis=response.analysis,
            result=response.result,
        )

    async def stream(self, messages: list[ChatMessage]) -> AsyncIterator[StreamChunk]:
        """Yield model text fragments, then ``done``; a failure ends with ``error``."""
        try:
            stream = await self._client.chat.completions.create(
                model=self._settings.openai_model,
                messages=[m.model_dump() for m in messages],
                stream=True,
            )
            async for event in stream:
                if not event.choices:
                    continue
                fragment = event.choices[0].delta.content
                if fragment:
                    yield StreamChunk(type="text", content=fragment)
        except Exception as exc:
            logger.error("Streaming error: %s", exc)
            yield StreamChunk(type="error", error=str(exc))
            return

        yield StreamChunk(type="done")
