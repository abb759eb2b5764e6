"""Live smoke test against vivino.com.

Skipped unless ``LIVE_TESTS=1``.  Asserts only on shape, since ratings
and page markup change without notice.
"""

from __future__ import annotations

import os

import pytest

from vivino_rating.config.settings import Settings
from vivino_rating.main import build_resolver, shutdown
from vivino_rating.models.rating import RatingResult
from vivino_rating.providers.store.memory_store import MemoryKeyValueStore

pytestmark = [
    pytest.mark.live,
    pytest.mark.skipif(os.environ.get("LIVE_TESTS") != "1", reason="set LIVE_TESTS=1 to hit vivino.com"),
]


@pytest.mark.asyncio
async def test_resolves_well_known_wine() -> None:
    components = build_resolver(Settings(app_env="test"), store=MemoryKeyValueStore())
    try:
        outcome = await components["resolver"].resolve("Baron de Ley Reserva")
    finally:
        await shutdown(components)

    assert isinstance(outcome, RatingResult)
    if not outcome.is_empty:
        assert 0.0 < outcome.rating <= 5.0
        assert outcome.detail_url.startswith("https://www.vivino.com/")
