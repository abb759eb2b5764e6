"""Persistent, bounded, time-expiring rating cache.

The entire cache lives under one key of an :class:`IKeyValueStore` as a
JSON map::

    {
        "baron de ley reserva": {
            "data": {"rating": 3.8, "review_count": 5120, ...},
            "stored_at": 1760870400.0
        },
        ...
    }

There is no background sweeper.  Every ``get`` and ``set`` re-reads the
current map from the store, drops malformed and expired entries, and writes
the pruned map back when anything was dropped.  ``set`` additionally ranks
entries by ``stored_at`` (newest first) and truncates to ``max_entries``.

Re-reading on every call matters: two lookups for different wines can
finish back to back, and each ``set`` must merge into the map the other one
just wrote instead of overwriting it with a stale in-memory copy.
"""

from __future__ import annotations

import math
import time
from typing import Any, Callable

import structlog
from pydantic import ValidationError

from vivino_rating.interfaces.cache_provider import IRatingCache
from vivino_rating.interfaces.key_value_store import IKeyValueStore
from vivino_rating.models.rating import RatingResult
from vivino_rating.utils.errors import CacheError
from vivino_rating.utils.text_normalizer import normalize_wine_name

logger = structlog.get_logger(logger_name=__name__)

DEFAULT_STORAGE_KEY = "vivinoRatingCache"
DEFAULT_TTL_SECONDS = 6 * 60 * 60
DEFAULT_MAX_ENTRIES = 200


class PersistentRatingCache(IRatingCache):
    """Store-backed :class:`IRatingCache` with lazy expiry and recency eviction.

    Parameters
    ----------
    store:
        The key-value store holding the serialized map.
    storage_key:
        Key under which the whole map is stored.
    ttl:
        Entry lifetime in seconds; an entry aged ``>= ttl`` is never a hit.
    max_entries:
        Capacity bound enforced on every ``set``.
    clock:
        Returns the current time in seconds.  Injected by tests.
    """

    def __init__(
        self,
        store: IKeyValueStore,
        storage_key: str = DEFAULT_STORAGE_KEY,
        ttl: float = DEFAULT_TTL_SECONDS,
        max_entries: int = DEFAULT_MAX_ENTRIES,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._store = store
        self._storage_key = storage_key
        self._ttl = ttl
        self._max_entries = max_entries
        self._clock = clock

    # ------------------------------------------------------------------
    # IRatingCache implementation
    # ------------------------------------------------------------------

    async def get(self, name: str) -> RatingResult | None:
        key = normalize_wine_name(name)
        entries = await self._load_pruned()

        entry = entries.get(key)
        if entry is None:
            logger.debug("rating_cache_miss", key=key)
            return None

        logger.debug("rating_cache_hit", key=key)
        return RatingResult.model_validate(entry["data"])

    async def set(self, name: str, data: RatingResult) -> None:
        key = normalize_wine_name(name)
        entries = await self._load_pruned(write_back=False)

        entries[key] = {"data": data.model_dump(), "stored_at": self._clock()}

        ranked = sorted(entries.items(), key=lambda item: item[1]["stored_at"], reverse=True)
        evicted = len(ranked) - self._max_entries
        if evicted > 0:
            logger.info("rating_cache_evicted", count=evicted, max_entries=self._max_entries)

        await self._save(dict(ranked[: self._max_entries]))
        logger.debug("rating_cache_set", key=key)

    async def clear(self) -> None:
        await self._save({})
        logger.info("rating_cache_cleared", storage_key=self._storage_key)

    async def size(self) -> int:
        return len(await self._load_pruned())

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    async def _load_pruned(self, write_back: bool = True) -> dict[str, dict[str, Any]]:
        """Load the current map and drop malformed / expired entries.

        When *write_back* is true and something was dropped, the pruned map
        is persisted immediately.  ``set`` passes ``False`` because it writes
        the map itself right afterwards.
        """
        try:
            raw = await self._store.get(self._storage_key)
        except CacheError as exc:
            logger.warning("rating_cache_read_failed", error=str(exc))
            return {}

        if raw is None:
            return {}

        discarded = 0
        if not isinstance(raw, dict):
            logger.warning("rating_cache_malformed_root", kind=type(raw).__name__)
            raw = {}
            discarded = 1

        now = self._clock()
        entries: dict[str, dict[str, Any]] = {}
        for key, entry in raw.items():
            if self._is_live(entry, now):
                entries[key] = entry
            else:
                discarded += 1

        if discarded:
            logger.info("rating_cache_pruned", discarded=discarded, remaining=len(entries))
            if write_back:
                await self._save(entries)

        return entries

    def _is_live(self, entry: Any, now: float) -> bool:
        if not isinstance(entry, dict):
            return False

        stored_at = entry.get("stored_at")
        # bool is an int subclass; a stored True is not a timestamp.
        if isinstance(stored_at, bool) or not isinstance(stored_at, (int, float)):
            return False
        if math.isnan(stored_at) or now - stored_at >= self._ttl:
            return False

        try:
            RatingResult.model_validate(entry.get("data"))
        except ValidationError:
            return False
        return True

    async def _save(self, entries: dict[str, dict[str, Any]]) -> None:
        try:
            await self._store.set(self._storage_key, entries)
        except CacheError as exc:
            logger.warning("rating_cache_write_failed", error=str(exc))
