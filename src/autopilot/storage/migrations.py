"""SQLite CREATE TABLE statements."""

from __future__ import annotations

TABLES: list[str] = [
    """
    CREATE TABLE IF NOT EXISTS credentials (
        id TEXT PRIMARY KEY,
        user_id TEXT NOT NULL,
        provider TEXT NOT NULL,
        display_name TEXT NOT NULL,
        access_token_enc TEXT NOT NULL,
        refresh_token_enc TEXT,
        expires_at TEXT,
        metadata TEXT DEFAULT '{}',
        created_at TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS hub_connections (
        id TEXT PRIMARY KEY,
        user_id TEXT NOT NULL,
        external_account_id TEXT NOT NULL,
        toolkit_name TEXT NOT NULL,
        auth_config_id TEXT NOT NULL,
        status TEXT NOT NULL,
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL,
        UNIQUE (user_id, external_account_id)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS executions (
        id TEXT PRIMARY KEY,
        user_id TEXT NOT NULL,
        prompt TEXT NOT NULL,
        intent TEXT DEFAULT '',
        tool TEXT NOT NULL,
        action TEXT NOT NULL,
        strategy TEXT NOT NULL,
        success INTEGER NOT NULL,
        message TEXT DEFAULT '',
        error TEXT DEFAULT '',
        created_at TEXT NOT NULL
    )
    """,
]
