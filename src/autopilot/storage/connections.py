"""Local records of hub-mediated connections."""

from __future__ import annotations

from datetime import datetime, timezone

from autopilot.exceptions import StorageError
from autopilot.models.connection import Connection, ConnectionStatus
from autopilot.storage.database import Database

_COLUMNS = (
    "id, user_id, external_account_id, toolkit_name, auth_config_id, "
    "status, created_at, updated_at"
)


def _row_to_connection(row) -> Connection:
    return Connection(
        id=row[0],
        user_id=row[1],
        external_account_id=row[2],
        toolkit_name=row[3],
        auth_config_id=row[4],
        status=ConnectionStatus(row[5]),
        created_at=row[6],
        updated_at=row[7],
    )


class ConnectionStore:
    def __init__(self, database: Database) -> None:
        self._database = database

    async def upsert(
        self,
        user_id: str,
        external_account_id: str,
        auth_config_id: str,
        toolkit_name: str,
        status: ConnectionStatus = ConnectionStatus.PENDING,
    ) -> Connection:
        """Insert a row, or refresh the status of the (user, account) row."""
        candidate = Connection(
            user_id=user_id,
            external_account_id=external_account_id,
            auth_config_id=auth_config_id,
            toolkit_name=toolkit_name,
            status=status,
        )
        db = self._database.connection()
        await db.execute(
            f"INSERT INTO hub_connections ({_COLUMNS}) VALUES (?, ?, ?, ?, ?, ?, ?, ?) "
            "ON CONFLICT (user_id, external_account_id) "
            "DO UPDATE SET status = excluded.status, updated_at = excluded.updated_at",
            (
                candidate.id,
                candidate.user_id,
                candidate.external_account_id,
                candidate.toolkit_name,
                candidate.auth_config_id,
                candidate.status.value,
                candidate.created_at.isoformat(),
                candidate.updated_at.isoformat(),
            ),
        )
        await db.commit()
        stored = await self.get(user_id, external_account_id)
        if stored is None:
            raise StorageError(
                f"Connection {external_account_id} for user {user_id} missing after upsert"
            )
        return stored

    async def get(self, user_id: str, external_account_id: str) -> Connection | None:
        db = self._database.connection()
        cursor = await db.execute(
            f"SELECT {_COLUMNS} FROM hub_connections "
            "WHERE user_id = ? AND external_account_id = ?",
            (user_id, external_account_id),
        )
        row = await cursor.fetchone()
        return _row_to_connection(row) if row else None

    async def list(self, user_id: str) -> list[Connection]:
        db = self._database.connection()
        cursor = await db.execute(
            f"SELECT {_COLUMNS} FROM hub_connections WHERE user_id = ? "
            "ORDER BY created_at DESC",
            (user_id,),
        )
        return [_row_to_connection(r) for r in await cursor.fetchall()]

    async def update_status(self, external_account_id: str, status: ConnectionStatus) -> int:
        db = self._database.connection()
        cursor = await db.execute(
            "UPDATE hub_connections SET status = ?, updated_at = ? "
            "WHERE external_account_id = ?",
            (status.value, datetime.now(timezone.utc).isoformat(), external_account_id),
        )
        await db.commit()
        return cursor.rowcount

    async def delete(self, user_id: str, external_account_id: str) -> int:
        db = self._database.connection()
        cursor = await db.execute(
            "DELETE FROM hub_connections WHERE user_id = ? AND external_account_id = ?",
            (user_id, external_account_id),
        )
        await db.commit()
        return cursor.rowcount
