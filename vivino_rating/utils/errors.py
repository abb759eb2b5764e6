"""Custom exception hierarchy for the Vivino rating resolver.

All application exceptions inherit from :class:`VivinoRatingError`, which
carries an optional ``provider_name`` so log lines can identify which
component (e.g. "fetcher", "structured_state", "sqlite_store") raised.

    VivinoRatingError  (base -- catch-all)
    +-- FetchError            (one URL candidate failed)
    +-- FetchExhaustedError   (every URL candidate failed)
    +-- ParseError            (embedded page state could not be decoded)
    +-- CacheError            (persistent store unreadable / unwritable)
    +-- ConfigurationError    (startup / invalid settings)

None of these cross :meth:`RatingResolver.resolve`; the resolver converts
them into a :class:`~vivino_rating.models.rating.LookupFailure` value.
"""


class VivinoRatingError(Exception):
    """Base exception for all rating-resolution errors.

    ``__str__`` prefixes the provider name in brackets for log scanning,
    e.g. ``[fetcher] HTTP 503 for https://www.vivino.com/search/wines``.
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        provider_name: str | None = None,
    ) -> None:
        self._message = message
        self._provider_name = provider_name
        super().__init__(self._message)

    @property
    def message(self) -> str:
        return self._message

    @property
    def provider_name(self) -> str | None:
        return self._provider_name

    def __str__(self) -> str:
        if self._provider_name:
            return f"[{self._provider_name}] {self._message}"
        return self._message


# ---------------------------------------------------------------------------
# Network errors
# ---------------------------------------------------------------------------

class FetchError(VivinoRatingError):
    """Raised when a single URL candidate fails (status, short body, network, timeout)."""

    def __init__(
        self,
        message: str = "Fetching URL candidate failed",
        provider_name: str | None = None,
        url: str | None = None,
    ) -> None:
        self._url = url
        super().__init__(message=message, provider_name=provider_name)

    @property
    def url(self) -> str | None:
        return self._url


class FetchExhaustedError(VivinoRatingError):
    """Raised when every URL candidate has failed.

    The last observed candidate error is chained as ``__cause__``.
    """

    def __init__(
        self,
        message: str = "All URL candidates failed",
        provider_name: str | None = None,
        attempts: int = 0,
    ) -> None:
        self._attempts = attempts
        super().__init__(message=message, provider_name=provider_name)

    @property
    def attempts(self) -> int:
        return self._attempts


# ---------------------------------------------------------------------------
# Parsing / storage errors
# ---------------------------------------------------------------------------

class ParseError(VivinoRatingError):
    """Raised when embedded page state is present but cannot be decoded."""

    def __init__(
        self,
        message: str = "Page state could not be parsed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class CacheError(VivinoRatingError):
    """Raised by key-value stores when the backing storage fails."""

    def __init__(
        self,
        message: str = "Cache storage operation failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class ConfigurationError(VivinoRatingError):
    """Raised when configuration is invalid or missing at startup."""

    def __init__(
        self,
        message: str = "Invalid or missing configuration",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)
