"""In-process session cache using cachetools.TTLCache.

Sits in front of the persistent cache so repeated lookups on one listing
page skip the store round-trip and JSON decode entirely.  Only successful
results are ever placed here; the resolver never memoizes a failure.
"""

from __future__ import annotations

import time
from typing import Callable

import structlog
from cachetools import TTLCache

from vivino_rating.interfaces.cache_provider import IRatingCache
from vivino_rating.models.rating import RatingResult
from vivino_rating.utils.text_normalizer import normalize_wine_name

logger = structlog.get_logger(logger_name=__name__)


class SessionRatingCache(IRatingCache):
    """In-memory TTL cache backed by ``cachetools.TTLCache``.

    Parameters
    ----------
    max_size:
        Maximum number of entries before the least-recently-used entry
        is evicted.
    ttl:
        Time-to-live in seconds.  Keep it no longer than the persistent
        cache TTL so the two layers expire together.
    timer:
        Clock passed through to ``TTLCache``.  Injected by tests.
    """

    def __init__(
        self,
        max_size: int = 500,
        ttl: float = 6 * 60 * 60,
        timer: Callable[[], float] = time.monotonic,
    ) -> None:
        self._cache: TTLCache[str, RatingResult] = TTLCache(maxsize=max_size, ttl=ttl, timer=timer)

    # ------------------------------------------------------------------
    # IRatingCache implementation
    # ------------------------------------------------------------------

    async def get(self, name: str) -> RatingResult | None:
        """Retrieve the memoized rating for *name*, or ``None`` if missing/expired."""
        key = normalize_wine_name(name)
        value = self._cache.get(key)
        if value is not None:
            logger.debug("session_cache_hit", key=key)
        return value

    async def set(self, name: str, data: RatingResult) -> None:
        key = normalize_wine_name(name)
        self._cache[key] = data
        logger.debug("session_cache_set", key=key)

    async def clear(self) -> None:
        self._cache.clear()

    async def size(self) -> int:
        self._cache.expire()
        return len(self._cache)
