"""Abstract base class for persistent key-value stores.

The rating cache persists its whole map under one well-known key rather
than one entry per wine, so the store only needs ``get`` and ``set``.
Implementations may wrap browser extension storage, SQLite, a JSON file,
or a plain dict.  Values must be JSON-compatible (dict, list, str, int,
float, bool, None).
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any


class IKeyValueStore(ABC):
    """Contract for asynchronous key-value persistence.

    Both operations are async so that disk- or network-backed stores never
    block the event loop.
    """

    @abstractmethod
    async def get(self, key: str) -> Any | None:
        """Return the value stored under *key*, or ``None`` if absent.

        Parameters
        ----------
        key:
            The storage key to look up.

        Returns
        -------
        Any or None
            A fresh copy of the stored value.  Mutating it must not affect
            what the store holds until :meth:`set` is called.

        Raises
        ------
        vivino_rating.utils.errors.CacheError
            If the backing storage cannot be read.
        """

    @abstractmethod
    async def set(self, key: str, value: Any) -> None:
        """Replace the value stored under *key*.

        Parameters
        ----------
        key:
            The storage key.
        value:
            A JSON-compatible value.

        Raises
        ------
        vivino_rating.utils.errors.CacheError
            If the backing storage cannot be written.
        """

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a short identifier, e.g. ``"memory"`` or ``"sqlite"``."""
