"""SQLiteArea — durable, single-file storage area using aiosqlite."""

from __future__ import annotations

import json
from typing import Any

try:
    import aiosqlite
except ImportError as exc:
    raise ImportError(
        "SQLiteArea requires the 'aiosqlite' package. Install it with: pip install aiosqlite"
    ) from exc

from settings_store.areas.base import LOCAL, AreaName, StorageArea, StorageChange

_CREATE_TABLE = """
CREATE TABLE IF NOT EXISTS settings_store (
    area  TEXT NOT NULL,
    key   TEXT NOT NULL,
    value TEXT NOT NULL,
    PRIMARY KEY (area, key)
)
"""


class SQLiteArea(StorageArea):
    """Persistent area backed by a single SQLite file.

    Both areas may share one database file; rows are partitioned by the
    ``area`` column.

    Parameters:
        db_path: Path to the SQLite database file.  Use ``":memory:"``
                 for an in-memory database (useful for testing).
        name:    Area name, ``"local"`` or ``"sync"``.
    """

    def __init__(self, db_path: str = "settings_store.db", name: AreaName = LOCAL) -> None:
        super().__init__(name)
        self._db_path = db_path
        self._db: aiosqlite.Connection | None = None

    async def _connect(self) -> aiosqlite.Connection:
        if self._db is None:
            self._db = await aiosqlite.connect(self._db_path)
            await self._db.execute(_CREATE_TABLE)
            await self._db.commit()
        return self._db

    async def close(self) -> None:
        if self._db:
            await self._db.close()
            self._db = None

    # ── StorageArea protocol ─────────────────────────────────

    async def get(self, keys: list[str] | None = None) -> dict[str, Any]:
        db = await self._connect()
        if keys is None:
            cursor = await db.execute(
                "SELECT key, value FROM settings_store WHERE area = ?",
                (self.name,),
            )
        else:
            if not keys:
                return {}
            placeholders = ", ".join("?" for _ in keys)
            cursor = await db.execute(
                f"SELECT key, value FROM settings_store WHERE area = ? AND key IN ({placeholders})",
                (self.name, *keys),
            )
        rows = await cursor.fetchall()
        return {row[0]: json.loads(row[1]) for row in rows}

    async def set(self, values: dict[str, Any]) -> None:
        if not values:
            return
        db = await self._connect()
        previous = await self.get(list(values))
        await db.executemany(
            "INSERT OR REPLACE INTO settings_store (area, key, value) VALUES (?, ?, ?)",
            [(self.name, key, json.dumps(value)) for key, value in values.items()],
        )
        await db.commit()
        self._notify(
            {
                key: StorageChange(previous.get(key), json.loads(json.dumps(value)))
                for key, value in values.items()
            }
        )

    async def remove(self, keys: list[str]) -> None:
        if not keys:
            return
        db = await self._connect()
        previous = await self.get(keys)
        await db.executemany(
            "DELETE FROM settings_store WHERE area = ? AND key = ?",
            [(self.name, key) for key in keys],
        )
        await db.commit()
        self._notify({key: StorageChange(old_value=value) for key, value in previous.items()})

    async def clear(self) -> None:
        db = await self._connect()
        previous = await self.get()
        await db.execute("DELETE FROM settings_store WHERE area = ?", (self.name,))
        await db.commit()
        self._notify({key: StorageChange(old_value=value) for key, value in previous.items()})
