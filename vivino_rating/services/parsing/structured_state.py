"""Structured (embedded JSON state) rating extractor.

Current Vivino search pages ship their data as a serialized state blob
rather than as rendered wine cards.  The blob has been seen in two places:

1. ``<div data-preloaded-state="{&quot;search_results&quot;: ...}">`` --
   an HTML attribute holding entity-escaped JSON.
2. ``<script>window.__PRELOADED_STATE__ = {...};</script>`` -- an inline
   script assignment holding raw JSON.

Each location is tried in that order.  A location that is missing,
undecodable, or structurally wrong falls through to the next one.
"""

from __future__ import annotations

import html as html_lib
import json
import re
from dataclasses import dataclass
from typing import Any, Callable

from pydantic import BaseModel, ValidationError

from vivino_rating.interfaces.rating_extractor import IRatingExtractor
from vivino_rating.models.rating import RatingResult
from vivino_rating.utils.errors import ParseError
from vivino_rating.utils.logging import get_logger

DEFAULT_BASE_URL = "https://www.vivino.com"

_ATTRIBUTE_PATTERN = re.compile(
    r"""data-preloaded-state\s*=\s*(?:"(?P<dq>[^"]*)"|'(?P<sq>[^']*)')""",
    re.IGNORECASE,
)
_SCRIPT_PATTERN = re.compile(r"window\.__PRELOADED_STATE__\s*=\s*")


# ---------------------------------------------------------------------------
# State shape -- only the fields the rating needs; everything else ignored.
# ---------------------------------------------------------------------------

class _Statistics(BaseModel):
    ratings_average: float | None = None
    ratings_count: int | None = None


class _Wine(BaseModel):
    id: int
    name: str | None = None


class _Vintage(BaseModel):
    name: str | None = None
    wine: _Wine
    statistics: _Statistics | None = None


class _SearchMatch(BaseModel):
    vintage: _Vintage


# ---------------------------------------------------------------------------
# Locations
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class StateLocation:
    """Where to find a state blob and how to turn it into JSON text.

    Attributes
    ----------
    name:
        Identifier used in log events.
    locate:
        Returns the raw blob text (possibly followed by trailing markup),
        or ``None`` when the location is absent from the page.
    decode:
        Transforms the raw blob into JSON text.
    """

    name: str
    locate: Callable[[str], str | None]
    decode: Callable[[str], str]


def _locate_attribute(page: str) -> str | None:
    match = _ATTRIBUTE_PATTERN.search(page)
    if match is None:
        return None
    return match.group("dq") if match.group("dq") is not None else match.group("sq")


def _locate_script(page: str) -> str | None:
    match = _SCRIPT_PATTERN.search(page)
    if match is None:
        return None
    return page[match.end():]


def _identity(text: str) -> str:
    return text


DEFAULT_LOCATIONS: tuple[StateLocation, ...] = (
    StateLocation(name="preloaded_state_attribute", locate=_locate_attribute, decode=html_lib.unescape),
    StateLocation(name="preloaded_state_script", locate=_locate_script, decode=_identity),
)


class StructuredStateExtractor(IRatingExtractor):
    """Extract the first search match from an embedded state blob.

    Parameters
    ----------
    base_url:
        Prefix for the ``/wines/{id}`` detail URL.
    locations:
        Ordered locations to try.  Defaults to attribute, then script.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        locations: tuple[StateLocation, ...] = DEFAULT_LOCATIONS,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._locations = locations
        self._decoder = json.JSONDecoder()
        self._logger = get_logger(__name__)

    def extract(self, html: str) -> RatingResult | None:
        for location in self._locations:
            raw = location.locate(html)
            if raw is None:
                continue

            try:
                state = self._decode_state(location, raw)
                result = self._result_from_state(state)
            except ParseError as exc:
                self._logger.warning(
                    "structured_state_location_failed",
                    location=location.name,
                    error=exc.message,
                )
                continue

            if result is not None:
                self._logger.debug("structured_state_match", location=location.name)
                return result

            self._logger.debug("structured_state_no_match", location=location.name)

        return None

    def get_strategy_name(self) -> str:
        return "structured_state"

    # -- Private helpers -------------------------------------------------------

    def _decode_state(self, location: StateLocation, raw: str) -> Any:
        text = location.decode(raw).lstrip()
        try:
            # raw_decode tolerates the trailing ";</script>..." after the object.
            state, _ = self._decoder.raw_decode(text)
        except json.JSONDecodeError as exc:
            raise ParseError(
                message=f"Invalid JSON at {location.name}: {exc.msg}",
                provider_name=self.get_strategy_name(),
            ) from exc
        return state

    def _result_from_state(self, state: Any) -> RatingResult | None:
        """Navigate ``search_results.matches[0]`` and build a result.

        Returns ``None`` when the match list is missing or empty.  Raises
        :class:`ParseError` when the first match lacks a wine identifier or
        has fields of the wrong type.
        """
        if not isinstance(state, dict):
            raise ParseError(message="State root is not an object", provider_name=self.get_strategy_name())

        search_results = state.get("search_results")
        matches = search_results.get("matches") if isinstance(search_results, dict) else None
        if not isinstance(matches, list) or not matches:
            return None

        try:
            match = _SearchMatch.model_validate(matches[0])
        except ValidationError as exc:
            raise ParseError(
                message=f"First match is incomplete ({exc.error_count()} errors)",
                provider_name=self.get_strategy_name(),
            ) from exc

        vintage = match.vintage
        statistics = vintage.statistics or _Statistics()
        return RatingResult(
            rating=statistics.ratings_average or 0.0,
            review_count=statistics.ratings_count or 0,
            display_name=vintage.name or vintage.wine.name or "",
            detail_url=f"{self._base_url}/wines/{vintage.wine.id}",
        )
