"""Action models: analyzer output, adapter results, dispatch envelope."""

from __future__ import annotations

import enum
import uuid
from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ToolName(str, enum.Enum):
    GMAIL = "gmail"
    SLACK = "slack"
    SHEETS = "sheets"
    TELEGRAM = "telegram"


class ErrorCategory(str, enum.Enum):
    NOT_CONNECTED = "not_connected"
    MISSING_PARAMETERS = "missing_parameters"
    UNKNOWN_ACTION = "unknown_action"
    UNKNOWN_TOOL = "unknown_tool"
    AUTH_REQUIRED = "auth_required"
    EXECUTION_FAILURE = "execution_failure"
    TRANSPORT = "transport"
    CONFIGURATION = "configuration"


class DispatchStrategy(str, enum.Enum):
    DIRECT = "direct"
    HUB = "hub"


class ActionRequest(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    original_prompt: str
    intent: str = ""
    tool: str
    action: str
    parameters: dict[str, Any] = Field(default_factory=dict)
    required_credential: str | None = None


class ActionResult(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    success: bool
    message: str | None = None
    error: str | None = None
    error_category: ErrorCategory | None = None

    # Adapter payloads
    message_id: str | int | None = None
    ts: str | None = None
    emails: list[dict[str, Any]] | None = None
    channels: list[dict[str, Any]] | None = None
    values: list[list[Any]] | None = None
    count: int | None = None
    updated_range: str | None = None
    data: Any = None

    @classmethod
    def ok(cls, message: str, **payload: Any) -> ActionResult:
        return cls(success=True, message=message, **payload)

    @classmethod
    def fail(
        cls, error: str, category: ErrorCategory = ErrorCategory.EXECUTION_FAILURE
    ) -> ActionResult:
        return cls(success=False, error=error, error_category=category)

    def to_dict(self) -> dict[str, Any]:
        """Wire form: camelCase keys, unset payload fields omitted."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class AnalysisSummary(BaseModel):
    intent: str
    tool: str
    action: str
    hub_platform: str | None = None
    hub_action: str | None = None


class DispatchResponse(BaseModel):
    request_id: str
    analysis: AnalysisSummary
    result: ActionResult
    strategy: DispatchStrategy
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc)
    )
