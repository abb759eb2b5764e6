"""Shared pytest fixtures for the vivino-rating test suite."""

from __future__ import annotations

import json
from typing import Any, Callable

import httpx
import pytest

from vivino_rating.models.rating import RatingResult
from vivino_rating.providers.store.memory_store import MemoryKeyValueStore

# Filler so fixture pages clear the fetcher's minimum body size.
PAGE_PADDING = "<!-- " + "padding " * 40 + "-->"


def html_escape(text: str) -> str:
    """Escape the way Vivino escapes its data-preloaded-state attribute."""
    return (
        text.replace("&", "&amp;")
        .replace('"', "&quot;")
        .replace("<", "&lt;")
        .replace(">", "&gt;")
        .replace("'", "&#x27;")
        .replace("/", "&#x2F;")
    )


def wrap_page(body: str) -> str:
    return f"<!DOCTYPE html><html><head><title>Search</title></head><body>{body}{PAGE_PADDING}</body></html>"


class FakeClock:
    """Settable wall clock for TTL tests."""

    def __init__(self, start: float = 1_760_000_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


# ---------------------------------------------------------------------------
# Page fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def preloaded_state() -> dict[str, Any]:
    return {
        "search_results": {
            "matches": [
                {
                    "vintage": {
                        "name": "Test Wine 2020",
                        "seo_name": "test-wine-2020",
                        "wine": {"id": 555},
                        "statistics": {"ratings_average": 4.3, "ratings_count": 245},
                    }
                }
            ]
        }
    }


@pytest.fixture
def structured_page(preloaded_state: dict[str, Any]) -> str:
    encoded = html_escape(json.dumps(preloaded_state))
    return wrap_page(f'<div data-preloaded-state="{encoded}"></div>')


@pytest.fixture
def legacy_page() -> str:
    return wrap_page(
        """
<div class="wine-card__content">
  <a class="link-color-alt-grey" href="/wines/123"><span>Sample Legacy</span></a>
  <div class="text-inline-block light average__number">4.4</div>
  <span class="text-micro">1,234 ratings</span>
</div></div></div>"""
    )


@pytest.fixture
def empty_page() -> str:
    return wrap_page("<div class='search-results'>No results</div>")


@pytest.fixture
def expected_structured_result() -> RatingResult:
    return RatingResult(
        rating=4.3,
        review_count=245,
        display_name="Test Wine 2020",
        detail_url="https://www.vivino.com/wines/555",
    )


# ---------------------------------------------------------------------------
# Infrastructure fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def memory_store() -> MemoryKeyValueStore:
    return MemoryKeyValueStore()


@pytest.fixture
def mock_http() -> Callable[..., tuple[httpx.AsyncClient, list[httpx.Request]]]:
    """Factory building an AsyncClient over ``httpx.MockTransport``.

    Returns ``(client, requests)``; every request the handler sees is
    appended to ``requests`` so tests can count upstream calls.
    """

    def factory(handler: Callable[[httpx.Request], Any], **client_kwargs: Any):
        requests: list[httpx.Request] = []

        async def recording_handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            response = handler(request)
            if not isinstance(response, httpx.Response):
                response = await response
            return response

        client = httpx.AsyncClient(transport=httpx.MockTransport(recording_handler), **client_kwargs)
        return client, requests

    return factory
