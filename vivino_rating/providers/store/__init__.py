"""Key-value store providers backing the persistent rating cache."""

from vivino_rating.providers.store.memory_store import MemoryKeyValueStore
from vivino_rating.providers.store.sqlite_store import SQLiteKeyValueStore

__all__ = ["MemoryKeyValueStore", "SQLiteKeyValueStore"]
