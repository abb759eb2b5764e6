"""Rating value types exchanged across the resolution boundary.

Defines Pydantic v2 models for a resolved Vivino rating and for the
"lookup failed" marker.  Both are frozen; a lookup produces one of the two
and never raises, so the presentation layer can branch on the type (or on
``is_error``) instead of wrapping every call in ``try``.

``to_message()`` renders the positional list shape that the browser
extension passes between its background and content scripts.
"""

from __future__ import annotations

from typing import Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field


class RatingResult(BaseModel):
    """A normalized Vivino rating for one wine.

    The all-zero instance (see :meth:`empty`) is the deliberate "known empty"
    outcome for a page that was fetched but held no parseable rating.
    """

    model_config = ConfigDict(frozen=True)

    rating: float = 0.0
    review_count: int = Field(default=0, ge=0)
    display_name: str = ""
    detail_url: str = ""

    @property
    def is_error(self) -> bool:
        return False

    @property
    def is_empty(self) -> bool:
        """``True`` for the zero-valued "no data found" result."""
        return self == RatingResult.empty()

    @classmethod
    def empty(cls) -> RatingResult:
        return cls(rating=0.0, review_count=0, display_name="", detail_url="")

    def to_message(self) -> list[Any]:
        """Return ``[rating, review_count, display_name, detail_url]``."""
        return [self.rating, self.review_count, self.display_name, self.detail_url]


class LookupFailure(BaseModel):
    """Marker returned by the resolver when a lookup could not complete.

    Never cached.  ``reason`` is a short machine-friendly tag such as
    ``"fetch_exhausted"`` or ``"unexpected_error"``; ``detail`` carries the
    underlying error text for logs and debugging.
    """

    model_config = ConfigDict(frozen=True)

    status: Literal["error"] = "error"
    reason: str = "lookup_failed"
    detail: str = ""

    @property
    def is_error(self) -> bool:
        return True

    def to_message(self) -> list[Any]:
        """Return ``["error", reason]``."""
        return [self.status, self.reason]


RatingOutcome = Union[RatingResult, LookupFailure]
