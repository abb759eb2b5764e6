"""Request coalescing for concurrent rating lookups.

A retailer listing page commonly shows the same wine several times (grid
tile, "recently viewed" strip, comparison table).  Each element triggers a
lookup, and without coalescing each would hit Vivino separately.

:class:`InFlightCoalescer` keeps at most one outstanding task per
normalized key.  Later callers for the same key receive the very same task
and therefore the same outcome, including a shared failure.  The task
removes its own key once it settles, so a failed lookup never blocks the
next attempt for that wine.
"""

from __future__ import annotations

import asyncio
from typing import Awaitable, Callable, Generic, TypeVar

import structlog

from vivino_rating.utils.logging import get_logger

_T = TypeVar("_T")

_logger: structlog.BoundLogger = get_logger(__name__)


class InFlightCoalescer(Generic[_T]):
    """Process-local map of key -> outstanding :class:`asyncio.Task`.

    One instance is owned by each :class:`RatingResolver`; tests construct a
    fresh one per case.
    """

    def __init__(self) -> None:
        self._inflight: dict[str, asyncio.Task[_T]] = {}

    def get_or_create(
        self, key: str, factory: Callable[[], Awaitable[_T]]
    ) -> asyncio.Task[_T]:
        """Return the task registered for *key*, creating it via *factory* if absent.

        Parameters
        ----------
        key:
            Normalized lookup key.
        factory:
            Zero-argument callable returning the awaitable that performs the
            lookup.  Only invoked when no task is outstanding for *key*.

        Returns
        -------
        asyncio.Task
            The shared task.  Await it through :func:`asyncio.shield` so one
            cancelled waiter does not cancel the lookup for everyone else.
        """
        existing = self._inflight.get(key)
        if existing is not None:
            _logger.debug("inflight_joined", key=key)
            return existing

        task = asyncio.ensure_future(factory())
        self._inflight[key] = task
        task.add_done_callback(lambda finished: self._release(key, finished))
        _logger.debug("inflight_started", key=key)
        return task

    def _release(self, key: str, task: asyncio.Task[_T]) -> None:
        if self._inflight.get(key) is task:
            del self._inflight[key]

    def is_pending(self, key: str) -> bool:
        """Return ``True`` while a lookup for *key* is outstanding."""
        return key in self._inflight

    def __len__(self) -> int:
        return len(self._inflight)
