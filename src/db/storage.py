# key/value persistence on top of the local sqlite file
from __future__ import annotations

from typing import Optional

from db.database import connect


class KeyValueStore:
    """Small async string store; one row per key."""

    def __init__(self, path: Optional[str] = None) -> None:
        self.path = path

    async def get(self, key: str) -> Optional[str]:
        async with connect(self.path) as conn:
            cur = await conn.execute("SELECT value FROM kv WHERE key = ?;", (key,))
            row = await cur.fetchone()
            await cur.close()
        return row[0] if row else None

    async def put(self, key: str, value: str) -> None:
        async with connect(self.path) as conn:
            await conn.execute(
                "INSERT INTO kv(key, value) VALUES (?, ?) "
                "ON CONFLICT(key) DO UPDATE SET value = excluded.value;",
                (key, value),
            )
            await conn.commit()

    async def delete(self, key: str) -> None:
        async with connect(self.path) as conn:
            await conn.execute("DELETE FROM kv WHERE key = ?;", (key,))
            await conn.commit()
