"""SQLite-backed key-value store.

Persists JSON-encoded values to a local SQLite database at
``data/rating_cache.db``.  Uses ``aiosqlite`` for async I/O.
"""

from __future__ import annotations

import json
import sqlite3
from pathlib import Path
from typing import Any

import aiosqlite
import structlog

from vivino_rating.interfaces.key_value_store import IKeyValueStore
from vivino_rating.utils.errors import CacheError

logger = structlog.get_logger(logger_name=__name__)

_DEFAULT_DB_PATH = Path("data/rating_cache.db")

_CREATE_TABLE_SQL = """\
CREATE TABLE IF NOT EXISTS kv_store (
    key         TEXT    PRIMARY KEY,
    value       TEXT    NOT NULL,
    updated_at  TEXT    NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%fZ', 'now'))
);
"""

_UPSERT_SQL = """\
INSERT INTO kv_store (key, value)
VALUES (?, ?)
ON CONFLICT(key)
DO UPDATE SET value      = excluded.value,
              updated_at = strftime('%Y-%m-%dT%H:%M:%fZ', 'now');
"""

_SELECT_SQL = "SELECT value FROM kv_store WHERE key = ?;"


class SQLiteKeyValueStore(IKeyValueStore):
    """SQLite-backed :class:`IKeyValueStore` storing one JSON document per key."""

    def __init__(self, db_path: str | Path = _DEFAULT_DB_PATH) -> None:
        self._db_path = Path(db_path)
        self._initialized = False

    async def initialize(self) -> None:
        """Create the table if it doesn't exist."""
        try:
            self._db_path.parent.mkdir(parents=True, exist_ok=True)
            async with aiosqlite.connect(str(self._db_path)) as db:
                await db.execute(_CREATE_TABLE_SQL)
                await db.commit()
        except (sqlite3.Error, OSError) as exc:
            raise CacheError(
                message=f"Could not initialize {self._db_path}: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc
        self._initialized = True
        logger.info("kv_store_initialized", path=str(self._db_path))

    async def get(self, key: str) -> Any | None:
        if not self._initialized:
            await self.initialize()
        try:
            async with aiosqlite.connect(str(self._db_path)) as db:
                cursor = await db.execute(_SELECT_SQL, (key,))
                row = await cursor.fetchone()
        except (sqlite3.Error, OSError) as exc:
            raise CacheError(
                message=f"Read of {key!r} failed: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

        if row is None:
            return None
        try:
            return json.loads(row[0])
        except json.JSONDecodeError:
            # Corrupt rows read as absent; the next set() overwrites them.
            logger.warning("kv_store_corrupt_value", key=key)
            return None

    async def set(self, key: str, value: Any) -> None:
        if not self._initialized:
            await self.initialize()
        try:
            payload = json.dumps(value, separators=(",", ":"))
        except (TypeError, ValueError) as exc:
            raise CacheError(
                message=f"Value for {key!r} is not JSON-serializable: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc
        try:
            async with aiosqlite.connect(str(self._db_path)) as db:
                await db.execute(_UPSERT_SQL, (key, payload))
                await db.commit()
        except (sqlite3.Error, OSError) as exc:
            raise CacheError(
                message=f"Write of {key!r} failed: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc
        logger.debug("kv_store_set", key=key, bytes=len(payload))

    def get_provider_name(self) -> str:
        return "sqlite"
