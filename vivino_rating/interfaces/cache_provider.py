"""Abstract base class for rating caches.

Defines the contract shared by the persistent, store-backed cache and the
in-process session memo cache.  Keys are raw wine names; every
implementation normalizes them itself so callers never need to.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from vivino_rating.models.rating import RatingResult


class IRatingCache(ABC):
    """Contract for wine-name -> :class:`RatingResult` caches.

    Implementations must not raise from :meth:`get` or :meth:`set`;
    storage problems are logged and treated as a miss.
    """

    @abstractmethod
    async def get(self, name: str) -> RatingResult | None:
        """Return the cached rating for *name*, or ``None`` on miss/expiry.

        Parameters
        ----------
        name:
            Raw wine name; normalized by the implementation.
        """

    @abstractmethod
    async def set(self, name: str, data: RatingResult) -> None:
        """Store *data* for *name*, stamping it with the current time.

        Parameters
        ----------
        name:
            Raw wine name; normalized by the implementation.
        data:
            The rating to cache.
        """

    @abstractmethod
    async def clear(self) -> None:
        """Remove every entry."""

    @abstractmethod
    async def size(self) -> int:
        """Return the number of live (non-expired) entries."""
