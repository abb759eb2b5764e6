"""In-memory key-value store.

Used by the test suite and for short-lived processes where persistence
across restarts is not needed.  Values are deep-copied on the way in and
out so callers get the same isolation a serializing store would give.
"""

from __future__ import annotations

import copy
from typing import Any

import structlog

from vivino_rating.interfaces.key_value_store import IKeyValueStore

logger = structlog.get_logger(logger_name=__name__)


class MemoryKeyValueStore(IKeyValueStore):
    """Dict-backed :class:`IKeyValueStore`.

    Parameters
    ----------
    initial:
        Optional starting contents, copied on construction.
    """

    def __init__(self, initial: dict[str, Any] | None = None) -> None:
        self._data: dict[str, Any] = copy.deepcopy(initial) if initial else {}

    async def get(self, key: str) -> Any | None:
        value = self._data.get(key)
        logger.debug("kv_get", key=key, found=value is not None)
        return copy.deepcopy(value)

    async def set(self, key: str, value: Any) -> None:
        self._data[key] = copy.deepcopy(value)
        logger.debug("kv_set", key=key)

    def get_provider_name(self) -> str:
        return "memory"
