"""Public interface definitions for the resolver's collaborators.

Everything the resolver touches outside its own logic is reached through
the abstract base classes in this package, so tests can inject in-memory
fakes and production can swap storage backends without touching the core.

CONCRETE PROVIDER MAP:
    Interface          ->  Concrete implementations
    ─────────────────────────────────────────────────────────────────────
    IKeyValueStore     ->  MemoryKeyValueStore, SQLiteKeyValueStore
    IRatingCache       ->  PersistentRatingCache, SessionRatingCache
    IRatingExtractor   ->  StructuredStateExtractor, LegacyCardExtractor

Re-exports
----------
IKeyValueStore
    Async get/set persistence contract.
IRatingCache
    Wine-name -> RatingResult cache contract.
IRatingExtractor
    Single page-format extraction strategy contract.
"""

from vivino_rating.interfaces.cache_provider import IRatingCache
from vivino_rating.interfaces.key_value_store import IKeyValueStore
from vivino_rating.interfaces.rating_extractor import IRatingExtractor

__all__ = [
    "IKeyValueStore",
    "IRatingCache",
    "IRatingExtractor",
]
