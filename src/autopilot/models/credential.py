"""Credential models for the per-user token store."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, Field


class Tokens(BaseModel):
    access_token: str
    refresh_token: str | None = None


class Credential(BaseModel):
    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    user_id: str
    provider: str
    display_name: str
    access_token_enc: str
    refresh_token_enc: str | None = None
    expires_at: datetime | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc)
    )


class CredentialSummary(BaseModel):
    id: str
    provider: str
    display_name: str
    expires_at: datetime | None = None
