"""Integration-hub connection models."""

from __future__ import annotations

import enum
import uuid
from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, Field


class ConnectionStatus(str, enum.Enum):
    PENDING = "PENDING"
    ACTIVE = "ACTIVE"
    EXPIRED = "EXPIRED"
    FAILED = "FAILED"


TERMINAL_FAILURES = frozenset({ConnectionStatus.EXPIRED, ConnectionStatus.FAILED})


class Connection(BaseModel):
    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    user_id: str
    external_account_id: str
    toolkit_name: str
    auth_config_id: str
    status: ConnectionStatus = ConnectionStatus.PENDING
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc)
    )
    updated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc)
    )


class ConnectionPoll(BaseModel):
    """One observation of a connection's status on the hub."""

    connection_id: str
    status: ConnectionStatus
    reason: str = ""
    account: dict[str, Any] = Field(default_factory=dict)

    @property
    def is_active(self) -> bool:
        return self.status == ConnectionStatus.ACTIVE

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_FAILURES


class InitiatedConnection(BaseModel):
    redirect_url: str
    connection_id: str
    toolkit: str
