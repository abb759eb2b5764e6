"""Data models for rating resolution.

Re-exports
----------
RatingResult
    Frozen rating record (rating, review count, display name, detail URL).
LookupFailure
    Frozen "lookup failed" marker returned instead of raising.
RatingOutcome
    ``RatingResult | LookupFailure`` alias for resolver return values.
"""

from vivino_rating.models.rating import LookupFailure, RatingOutcome, RatingResult

__all__ = ["LookupFailure", "RatingOutcome", "RatingResult"]
