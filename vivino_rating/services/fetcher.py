"""Multi-candidate page fetcher.

Vivino serves the same search results under several paths (``/en/search``
vs ``/search``) and occasionally answers one of them with a redirect loop,
an error status or a near-empty stub page.  :class:`RatingPageFetcher`
walks an ordered list of semantically equivalent URLs, giving each one a
hard timeout, and returns the first genuine page body.

The ``httpx.AsyncClient`` is injected via the constructor for testability.
"""

from __future__ import annotations

import asyncio
from http.cookiejar import CookieJar, DefaultCookiePolicy

import httpx

from vivino_rating.utils.errors import FetchError, FetchExhaustedError
from vivino_rating.utils.logging import get_logger

DEFAULT_TIMEOUT_MS = 12_000
DEFAULT_MIN_RESPONSE_BYTES = 200
DEFAULT_HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/142.0.0.0 Safari/537.36"
    ),
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.9",
}


def credentialless_cookie_jar() -> CookieJar:
    """Return a cookie jar that never stores or sends a cookie.

    An empty ``allowed_domains`` list rejects every domain, so Set-Cookie
    headers on redirects and responses are dropped as well.
    """
    return CookieJar(policy=DefaultCookiePolicy(allowed_domains=[]))


class RatingPageFetcher:
    """Fetch page text from the first URL candidate that answers properly.

    Parameters
    ----------
    http_client:
        Shared async client.  Its cookie jar carries Vivino session cookies
        between requests when credentials are retained.
    headers:
        Request headers sent with every candidate.
    min_response_bytes:
        Bodies shorter than this are treated as stub/error pages.
    anonymous_client:
        Client used when credentials are withheld.  It must not share the
        session cookie jar; see :func:`credentialless_cookie_jar`.  Created
        on first use (and closed by :meth:`aclose`) when omitted.
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        headers: dict[str, str] | None = None,
        min_response_bytes: int = DEFAULT_MIN_RESPONSE_BYTES,
        anonymous_client: httpx.AsyncClient | None = None,
    ) -> None:
        self._http = http_client
        self._anonymous_http = anonymous_client
        self._owns_anonymous_http = False
        self._headers = dict(DEFAULT_HEADERS if headers is None else headers)
        self._min_response_bytes = min_response_bytes
        self._logger = get_logger(__name__)

    async def fetch_text(
        self,
        url_candidates: list[str],
        timeout_ms: int = DEFAULT_TIMEOUT_MS,
        retain_credentials: bool = True,
    ) -> str:
        """Return the body of the first candidate that succeeds.

        Parameters
        ----------
        url_candidates:
            Fully-formed URLs, tried in order.
        timeout_ms:
            Per-candidate budget.  When exceeded the request is cancelled
            and the next candidate is tried.
        retain_credentials:
            Send the shared client's cookies.  When false the request and
            any redirects go through the anonymous client, so session cookies
            are neither sent nor updated.

        Returns
        -------
        str
            The decoded response body.

        Raises
        ------
        FetchExhaustedError
            If every candidate failed.  The last candidate's error is chained
            as ``__cause__``.
        """
        last_error: FetchError | None = None

        for attempt, url in enumerate(url_candidates, start=1):
            try:
                text = await self._fetch_candidate(url, timeout_ms / 1000.0, retain_credentials)
            except FetchError as exc:
                last_error = exc
                self._logger.warning(
                    "fetch_candidate_failed",
                    url=url,
                    attempt=attempt,
                    error=exc.message,
                )
                continue

            self._logger.info("fetch_candidate_succeeded", url=url, attempt=attempt, bytes=len(text))
            return text

        raise FetchExhaustedError(
            message=f"All {len(url_candidates)} URL candidates failed",
            provider_name="fetcher",
            attempts=len(url_candidates),
        ) from last_error

    async def _fetch_candidate(self, url: str, timeout: float, retain_credentials: bool) -> str:
        client = self._client_for(retain_credentials)
        request = client.build_request("GET", url, headers=self._headers)

        try:
            # wait_for cancels the in-flight send when the budget runs out.
            response = await asyncio.wait_for(
                client.send(request, follow_redirects=True),
                timeout=timeout,
            )
        except asyncio.TimeoutError as exc:
            raise FetchError(
                message=f"Timed out after {timeout:.1f}s",
                provider_name="fetcher",
                url=url,
            ) from exc
        except httpx.HTTPError as exc:
            # Timeout subclasses often carry an empty message.
            detail = f"{type(exc).__name__}: {exc}" if str(exc) else type(exc).__name__
            raise FetchError(
                message=f"HTTP error: {detail}",
                provider_name="fetcher",
                url=url,
            ) from exc

        if not response.is_success:
            raise FetchError(
                message=f"HTTP {response.status_code}",
                provider_name="fetcher",
                url=url,
            )

        if len(response.content) < self._min_response_bytes:
            raise FetchError(
                message=f"Response body too short ({len(response.content)} bytes)",
                provider_name="fetcher",
                url=url,
            )

        return response.text

    def _client_for(self, retain_credentials: bool) -> httpx.AsyncClient:
        if retain_credentials:
            return self._http
        if self._anonymous_http is None:
            self._anonymous_http = httpx.AsyncClient(
                cookies=credentialless_cookie_jar(),
                timeout=self._http.timeout,
            )
            self._owns_anonymous_http = True
        return self._anonymous_http

    async def aclose(self) -> None:
        """Close the anonymous client if this fetcher created it."""
        if self._owns_anonymous_http and self._anonymous_http is not None:
            await self._anonymous_http.aclose()
            self._anonymous_http = None
            self._owns_anonymous_http = False
