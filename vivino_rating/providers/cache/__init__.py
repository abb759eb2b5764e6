"""Rating cache providers: persistent (store-backed) and session (in-process)."""

from vivino_rating.providers.cache.memory_cache import SessionRatingCache
from vivino_rating.providers.cache.persistent_cache import PersistentRatingCache

__all__ = ["PersistentRatingCache", "SessionRatingCache"]
