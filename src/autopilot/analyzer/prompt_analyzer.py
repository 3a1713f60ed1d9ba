"""OpenAI-based prompt analysis into a structured action request."""

from __future__ import annotations

import json
import logging
from typing import Any

from openai import AsyncOpenAI
from pydantic import ValidationError

from autopilot.analyzer.prompt_templates import DEFAULT_EMAIL_BODY, SYSTEM_PROMPT
from autopilot.config.settings import Settings
from autopilot.exceptions import MalformedAnalysisError
from autopilot.models.action import ActionRequest

logger = logging.getLogger(__name__)

EMAIL_SEND_ACTIONS = frozenset({"send_email"})


def repair_parameters(action: str, parameters: Any) -> dict[str, Any]:
    """Apply the deterministic fix-ups the model cannot be trusted with."""
    params: dict[str, Any] = dict(parameters) if isinstance(parameters, dict) else {}

    if action in EMAIL_SEND_ACTIONS:
        if not params.get("body") and params.get("subject"):
            params["body"] = params["subject"]
        if not params.get("body"):
            params["body"] = DEFAULT_EMAIL_BODY

    return params


class PromptAnalyzer:
    def __init__(self, settings: Settings, client: AsyncOpenAI | None = None) -> None:
        self._settings = settings
        self._client = client or AsyncOpenAI(
            api_key=settings.openai_api_key,
            max_retries=settings.llm_max_retries,
        )

    async def analyze(self, prompt: str) -> ActionRequest:
        if not prompt.strip():
            raise MalformedAnalysisError("Empty prompt")

        try:
            response = await self._client.chat.completions.create(
                model=self._settings.openai_model,
                messages=[
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": prompt},
                ],
                response_format={"type": "json_object"},
                temperature=self._settings.analysis_temperature,
            )
        except Exception as exc:
            raise MalformedAnalysisError(f"OpenAI API error: {exc}") from exc

        raw = response.choices[0].message.content
        if not raw:
            raise MalformedAnalysisError("OpenAI returned empty content")

        try:
            data = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise MalformedAnalysisError(f"Malformed JSON from OpenAI: {exc}") from exc

        if not isinstance(data, dict):
            raise MalformedAnalysisError("OpenAI response is not a JSON object")

        tool = str(data.get("tool") or "").strip().lower()
        action = str(data.get("action") or "").strip()
        if not tool or not action:
            raise MalformedAnalysisError("Analysis is missing tool or action")

        try:
            request = ActionRequest(
                original_prompt=prompt,
                intent=str(data.get("intent") or ""),
                tool=tool,
                action=action,
                parameters=repair_parameters(action, data.get("parameters")),
                required_credential=data.get("requiredCredential") or None,
            )
        except ValidationError as exc:
            raise MalformedAnalysisError(f"Invalid analysis: {exc}") from exc
        logger.debug("Analyzed prompt as %s.%s", request.tool, request.action)
        return request
