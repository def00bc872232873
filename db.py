import sqlite3
import aiosqlite
import datetime
import json
import logging
from contextlib import contextmanager, asynccontextmanager
from typing import Any, List, Optional, Tuple

from errors import StorageError

logger = logging.getLogger(__name__)


class Database:
    """Provides SQLite connection management and schema initialization."""

    _TABLE_DEFINITIONS = {
        "user_data": (
            """CREATE TABLE IF NOT EXISTS user_data (
                    user_id TEXT NOT NULL,
                    key TEXT NOT NULL,
                    value TEXT NOT NULL,
                    updated_at TEXT NOT NULL,
                    PRIMARY KEY (user_id, key)
                );"""
        ),
    }

    def __init__(self, db_path: str = "tracker.db") -> None:
        self._db_path = db_path
        self._ensure_schema()

    @property
    def db_path(self) -> str:
        return self._db_path

    @contextmanager
    def _connection(self):
        connection = sqlite3.connect(self._db_path)
        try:
            yield connection
            connection.commit()
        finally:
            connection.close()

    def _ensure_schema(self) -> None:
        with self._connection() as conn:
            for sql in self._TABLE_DEFINITIONS.values():
                conn.execute(sql)


class AsyncDatabase(Database):
    """Provides asynchronous connection management."""

    @asynccontextmanager
    async def _async_connection(self):
        conn = await aiosqlite.connect(self._db_path)
        try:
            yield conn
            await conn.commit()
        finally:
            await conn.close()


class AsyncBaseRepository(AsyncDatabase):
    """Asynchronous repository helpers that report failures as StorageError."""

    async def execute(self, query: str, params: Tuple = ()) -> int:
        try:
            async with self._async_connection() as conn:
                cursor = await conn.execute(query, params)
                await conn.commit()
                return cursor.rowcount
        except aiosqlite.Error as e:
            raise StorageError(str(e)) from e

    async def fetch_all(self, query: str, params: Tuple = ()) -> List[Tuple]:
        try:
            async with self._async_connection() as conn:
                cursor = await conn.execute(query, params)
                return list(await cursor.fetchall())
        except aiosqlite.Error as e:
            raise StorageError(str(e)) from e


class UserDataRepository(AsyncBaseRepository):
    """Per-user document table keyed by ``(user_id, key)``.

    Values are arbitrary JSON-serializable structures; no schema is enforced.
    """

    async def get(self, user_id: str, key: str) -> Optional[Any]:
        rows = await self.fetch_all(
            "SELECT value FROM user_data WHERE user_id = ? AND key = ?;",
            (user_id, key),
        )
        if not rows:
            return None
        try:
            return json.loads(rows[0][0])
        except ValueError as e:
            raise StorageError(f"corrupt document {user_id}/{key}") from e

    async def set(self, user_id: str, key: str, value: Any) -> None:
        try:
            payload = json.dumps(value)
        except (TypeError, ValueError) as e:
            raise StorageError(f"value for {key} is not serializable") from e
        updated_at = datetime.datetime.now(datetime.timezone.utc).isoformat()
        await self.execute(
            "INSERT INTO user_data (user_id, key, value, updated_at) VALUES (?, ?, ?, ?) "
            "ON CONFLICT(user_id, key) DO UPDATE SET value=excluded.value, updated_at=excluded.updated_at;",
            (user_id, key, payload, updated_at),
        )

    async def list(self, user_id: str, prefix: str = "") -> List[str]:
        rows = await self.fetch_all(
            "SELECT key FROM user_data WHERE user_id = ? ORDER BY key;",
            (user_id,),
        )
        return [r[0] for r in rows if r[0].startswith(prefix or "")]

    async def delete(self, user_id: str, key: str) -> None:
        await self.execute(
            "DELETE FROM user_data WHERE user_id = ? AND key = ?;",
            (user_id, key),
        )

    async def updated_at(self, user_id: str, key: str) -> Optional[str]:
        rows = await self.fetch_all(
            "SELECT updated_at FROM user_data WHERE user_id = ? AND key = ?;",
            (user_id, key),
        )
        return rows[0][0] if rows else None

    async def fetch_users(self) -> List[str]:
        rows = await self.fetch_all(
            "SELECT DISTINCT user_id FROM user_data ORDER BY user_id;"
        )
        return [r[0] for r in rows]
