"""Rating resolver -- the single public entry point.

Composes the pieces into one async operation::

    resolve(name)
        -> normalize_wine_name
        -> session cache / persistent cache   (hit: return)
        -> InFlightCoalescer                  (join an outstanding lookup)
        -> RatingPageFetcher                  (URL candidates, per-URL timeout)
        -> ParserPipeline                     (structured state, legacy cards)
        -> cache.set                          (successes only)

Outcomes are data, not exceptions.  A page that parses to nothing becomes
the zero-valued :class:`RatingResult` and is cached, so a wine Vivino does
not list is not re-fetched for every element on every page within the TTL.
A fetch failure becomes :class:`LookupFailure` and is never cached, so the
next request after an outage retries immediately.
"""

from __future__ import annotations

import asyncio
from typing import Sequence
from urllib.parse import quote

import structlog

from vivino_rating.interfaces.cache_provider import IRatingCache
from vivino_rating.models.rating import LookupFailure, RatingOutcome, RatingResult
from vivino_rating.services.fetcher import DEFAULT_TIMEOUT_MS, RatingPageFetcher
from vivino_rating.services.parsing.pipeline import ParserPipeline
from vivino_rating.utils.concurrency import InFlightCoalescer
from vivino_rating.utils.errors import FetchExhaustedError
from vivino_rating.utils.logging import get_logger
from vivino_rating.utils.text_normalizer import match_confidence, normalize_wine_name

DEFAULT_URL_TEMPLATES: tuple[str, ...] = (
    "https://www.vivino.com/en/search/wines?q={query}",
    "https://www.vivino.com/search/wines?q={query}",
)
_LOW_CONFIDENCE_THRESHOLD = 0.5

_logger: structlog.BoundLogger = get_logger(__name__)


class RatingResolver:
    """Resolve free-text wine names to Vivino ratings.

    Construct once per process (see :func:`vivino_rating.main.build_resolver`)
    so every caller shares the same coalescer and caches.

    Parameters
    ----------
    fetcher:
        Multi-candidate page fetcher.
    parser:
        Extraction pipeline.
    cache:
        Persistent rating cache.
    url_templates:
        Search URLs with a ``{query}`` placeholder, tried in order.
    timeout_ms:
        Per-candidate fetch timeout.
    retain_credentials:
        Send the HTTP client's cookies with search requests.
    session_cache:
        Optional in-process cache consulted before *cache*.
    coalescer:
        In-flight map; a fresh one is created when omitted.
    """

    def __init__(
        self,
        fetcher: RatingPageFetcher,
        parser: ParserPipeline,
        cache: IRatingCache,
        url_templates: Sequence[str] = DEFAULT_URL_TEMPLATES,
        timeout_ms: int = DEFAULT_TIMEOUT_MS,
        retain_credentials: bool = True,
        session_cache: IRatingCache | None = None,
        coalescer: InFlightCoalescer[RatingOutcome] | None = None,
    ) -> None:
        self._fetcher = fetcher
        self._parser = parser
        self._cache = cache
        self._url_templates = list(url_templates)
        self._timeout_ms = timeout_ms
        self._retain_credentials = retain_credentials
        self._session_cache = session_cache
        self._coalescer: InFlightCoalescer[RatingOutcome] = coalescer or InFlightCoalescer()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def resolve(self, name: str) -> RatingOutcome:
        """Return the rating for *name*, or :class:`LookupFailure`.

        Never raises.  Concurrent calls whose names normalize to the same
        key share one fetch and receive the same outcome.
        """
        key = normalize_wine_name(name)
        try:
            cached = await self._cached(name)
            if cached is not None:
                return cached

            task = self._coalescer.get_or_create(key, lambda: self._lookup(name, key))
            # shield: a cancelled waiter must not cancel the lookup for the others.
            return await asyncio.shield(task)
        except asyncio.CancelledError:
            raise
        except Exception as exc:  # noqa: BLE001
            _logger.error("rating_resolve_unexpected_error", key=key, error=str(exc))
            return LookupFailure(reason="unexpected_error", detail=str(exc))

    def build_urls(self, name: str) -> list[str]:
        """Expand the URL templates for *name* (trimmed, percent-encoded)."""
        query = quote(name.strip(), safe="")
        return [template.format(query=query) for template in self._url_templates]

    def is_pending(self, name: str) -> bool:
        """Return ``True`` while a lookup for *name* is in flight."""
        return self._coalescer.is_pending(normalize_wine_name(name))

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    async def _cached(self, name: str) -> RatingResult | None:
        if self._session_cache is not None:
            hit = await self._session_cache.get(name)
            if hit is not None:
                return hit

        hit = await self._cache.get(name)
        if hit is not None and self._session_cache is not None:
            await self._session_cache.set(name, hit)
        return hit

    async def _lookup(self, name: str, key: str) -> RatingOutcome:
        urls = self.build_urls(name)
        log = _logger.bind(key=key)

        try:
            html = await self._fetcher.fetch_text(
                urls,
                timeout_ms=self._timeout_ms,
                retain_credentials=self._retain_credentials,
            )
            result = self._parser.extract(html)
        except FetchExhaustedError as exc:
            cause = exc.__cause__ or exc
            log.warning("rating_lookup_failed", reason="fetch_exhausted", error=str(cause))
            return LookupFailure(reason="fetch_exhausted", detail=str(cause))
        except Exception as exc:  # noqa: BLE001
            log.error("rating_lookup_failed", reason="unexpected_error", error=str(exc))
            return LookupFailure(reason="unexpected_error", detail=str(exc))

        if result is None:
            log.info("rating_known_empty")
            result = RatingResult.empty()
        else:
            confidence = match_confidence(name, result.display_name)
            if confidence < _LOW_CONFIDENCE_THRESHOLD:
                log.warning(
                    "low_confidence_match",
                    query=name,
                    matched=result.display_name,
                    confidence=round(confidence, 2),
                )

        await self._cache.set(name, result)
        if self._session_cache is not None:
            await self._session_cache.set(name, result)

        log.info("rating_resolved", rating=result.rating, review_count=result.review_count)
        return result
