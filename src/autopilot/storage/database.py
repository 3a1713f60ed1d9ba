"""Shared aiosqlite connection for the credential, connection and execution stores."""

from __future__ import annotations

from pathlib import Path

import aiosqlite

from autopilot.storage.migrations import TABLES


class Database:
    def __init__(self, db_path: Path | str = ":memory:") -> None:
        self.db_path = str(db_path)
        self._db: aiosqlite.Connection | None = None

    async def initialize(self) -> None:
        if self.db_path != ":memory:":
            Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
        self._db = await aiosqlite.connect(self.db_path)
        for table_sql in TABLES:
            await self._db.execute(table_sql)
        await self._db.commit()

    async def close(self) -> None:
        if self._db:
            await self._db.close()
            self._db = None

    def connection(self) -> aiosqlite.Connection:
        if self._db is None:
            raise RuntimeError("Database not initialized; call initialize() first")
        return self._db
