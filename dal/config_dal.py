"""Async Data Access Layer for the CONFIG key-value table.

Provides ConfigDAL with get/put/delete operations compatible with
`utils.database_init.AsyncDatabaseInitializer`.
"""

from __future__ import annotations

import time
from typing import Optional

from utils.database_init import AsyncDatabaseInitializer


class ConfigDAL:
    """Data access layer for CONFIG rows.

    The constructor accepts an `AsyncDatabaseInitializer` (or any object
    exposing an async `connection()` context manager that yields an
    `aiosqlite.Connection`).
    """

    def __init__(self, db_initializer: AsyncDatabaseInitializer) -> None:
        self._db = db_initializer

    async def get(self, key: str) -> Optional[str]:
        """Return the stored value for `key`, or None when the slot is empty."""
        async with self._db.connection() as conn:
            cur = await conn.execute("SELECT value FROM CONFIG WHERE key = ?", (key,))
            row = await cur.fetchone()
        return row[0] if row else None

    async def put(self, key: str, value: str) -> None:
        """Insert or replace the value stored under `key`."""
        async with self._db.connection() as conn:
            await conn.execute(
                "INSERT INTO CONFIG (key, value, updated_at) VALUES (?, ?, ?) "
                "ON CONFLICT(key) DO UPDATE SET value = excluded.value, updated_at = excluded.updated_at",
                (key, value, int(time.time())),
            )
            await conn.commit()

    async def delete(self, key: str) -> bool:
        """Delete the slot and return True if a row was removed."""
        async with self._db.connection() as conn:
            cur = await conn.execute("DELETE FROM CONFIG WHERE key = ?", (key,))
            await conn.commit()
            return (cur.rowcount or 0) > 0
