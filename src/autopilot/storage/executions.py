"""Append-only history of dispatched requests."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

from pydantic import BaseModel, Field

from autopilot.models.action import DispatchResponse
from autopilot.storage.database import Database


class ExecutionRecord(BaseModel):
    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    user_id: str
    prompt: str
    intent: str = ""
    tool: str
    action: str
    strategy: str
    success: bool
    message: str = ""
    error: str = ""
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc)
    )


class ExecutionLog:
    def __init__(self, database: Database) -> None:
        self._database = database

    async def record(self, user_id: str, prompt: str, response: DispatchResponse) -> ExecutionRecord:
        record = ExecutionRecord(
            id=response.request_id,
            user_id=user_id,
            prompt=prompt,
            intent=response.analysis.intent,
            tool=response.analysis.tool,
            action=response.analysis.action,
            strategy=response.strategy.value,
            success=response.result.success,
            message=response.result.message or "",
            error=response.result.error or "",
            created_at=response.created_at,
        )
        db = self._database.connection()
        await db.execute(
            "INSERT INTO executions (id, user_id, prompt, intent, tool, action, strategy, "
            "success, message, error, created_at) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
            (
                record.id,
                record.user_id,
                record.prompt,
                record.intent,
                record.tool,
                record.action,
                record.strategy,
                int(record.success),
                record.message,
                record.error,
                record.created_at.isoformat(),
            ),
        )
        await db.commit()
        return record

    async def history(self, user_id: str, limit: int = 50) -> list[ExecutionRecord]:
        db = self._database.connection()
        cursor = await db.execute(
            "SELECT id, user_id, prompt, intent, tool, action, strategy, success, "
            "message, error, created_at FROM executions WHERE user_id = ? "
            "ORDER BY created_at DESC LIMIT ?",
            (user_id, limit),
        )
        rows = await cursor.fetchall()
        return [
            ExecutionRecord(
                id=r[0],
                user_id=r[1],
                prompt=r[2],
                intent=r[3],
                tool=r[4],
                action=r[5],
                strategy=r[6],
                success=bool(r[7]),
                message=r[8],
                error=r[9],
                created_at=r[10],
            )
            for r in rows
        ]
