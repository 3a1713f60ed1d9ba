"""Per-user, per-provider encrypted OAuth token store."""

from __future__ import annotations

import json
import logging
from datetime import datetime
from typing import Any

from autopilot.credentials.crypto import TokenCipher
from autopilot.models.credential import Credential, CredentialSummary, Tokens
from autopilot.storage.database import Database

logger = logging.getLogger(__name__)


class CredentialStore:
    """Credential rows with tokens encrypted at rest.

    Tokens are only decrypted inside :meth:`get`. When a user holds several
    rows for the same provider the oldest row wins.
    """

    def __init__(self, database: Database, cipher: TokenCipher) -> None:
        self._database = database
        self._cipher = cipher

    async def create(
        self,
        user_id: str,
        provider: str,
        display_name: str,
        access_token: str,
        refresh_token: str | None = None,
        expires_at: datetime | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> Credential:
        credential = Credential(
            user_id=user_id,
            provider=provider,
            display_name=display_name,
            access_token_enc=self._cipher.encrypt(access_token),
            refresh_token_enc=self._cipher.encrypt(refresh_token) if refresh_token else None,
            expires_at=expires_at,
            metadata=metadata or {},
        )
        db = self._database.connection()
        await db.execute(
            "INSERT INTO credentials (id, user_id, provider, display_name, access_token_enc, "
            "refresh_token_enc, expires_at, metadata, created_at) "
            "VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)",
            (
                credential.id,
                credential.user_id,
                credential.provider,
                credential.display_name,
                credential.access_token_enc,
                credential.refresh_token_enc,
                credential.expires_at.isoformat() if credential.expires_at else None,
                json.dumps(credential.metadata),
                credential.created_at.isoformat(),
            ),
        )
        await db.commit()
        logger.info("Stored %s credential for user %s", provider, user_id)
        return credential

    async def get(self, user_id: str, provider: str) -> Tokens | None:
        db = self._database.connection()
        cursor = await db.execute(
            "SELECT access_token_enc, refresh_token_enc FROM credentials "
            "WHERE user_id = ? AND provider = ? ORDER BY rowid ASC LIMIT 1",
            (user_id, provider),
        )
        row = await cursor.fetchone()
        if row is None:
            return None
        return Tokens(
            access_token=self._cipher.decrypt(row[0]),
            refresh_token=self._cipher.decrypt(row[1]) if row[1] else None,
        )

    async def list(self, user_id: str) -> list[CredentialSummary]:
        db = self._database.connection()
        cursor = await db.execute(
            "SELECT id, provider, display_name, expires_at FROM credentials "
            "WHERE user_id = ? ORDER BY rowid ASC",
            (user_id,),
        )
        rows = await cursor.fetchall()
        return [
            CredentialSummary(
                id=r[0],
                provider=r[1],
                display_name=r[2],
                expires_at=r[3],
            )
            for r in rows
        ]

    async def update_expiry(self, credential_id: str, expires_at: datetime | None) -> None:
        db = self._database.connection()
        await db.execute(
            "UPDATE credentials SET expires_at = ? WHERE id = ?",
            (expires_at.isoformat() if expires_at else None, credential_id),
        )
        await db.commit()

    async def delete(self, credential_id: str, user_id: str) -> bool:
        db = self._database.connection()
        cursor = await db.execute(
            "DELETE FROM credentials WHERE id = ? AND user_id = ?",
            (credential_id, user_id),
        )
        await db.commit()
        return cursor.rowcount > 0
