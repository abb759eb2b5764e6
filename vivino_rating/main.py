"""Composition root for the Vivino rating resolver.

Wires settings, the shared ``httpx.AsyncClient``, the key-value store, both
cache layers, the fetcher, the parser pipeline and the resolver together.
Call :func:`build_resolver` once per process and hand the returned
``resolver`` to whatever presentation layer needs ratings; call
:func:`shutdown` on exit to release the HTTP client.

    components = build_resolver()
    outcome = await components["resolver"].resolve("Baron de Ley Reserva 2018")
    await shutdown(components)
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import httpx
import structlog

from vivino_rating.config.loader import DEFAULT_CONFIG_PATH, load_config
from vivino_rating.config.settings import Settings
from vivino_rating.interfaces.key_value_store import IKeyValueStore
from vivino_rating.providers.cache.memory_cache import SessionRatingCache
from vivino_rating.providers.cache.persistent_cache import PersistentRatingCache
from vivino_rating.providers.store.sqlite_store import SQLiteKeyValueStore
from vivino_rating.services.fetcher import DEFAULT_HEADERS, RatingPageFetcher
from vivino_rating.services.parsing.pipeline import ParserPipeline
from vivino_rating.services.rating_resolver import DEFAULT_URL_TEMPLATES, RatingResolver
from vivino_rating.utils.errors import ConfigurationError
from vivino_rating.utils.logging import configure_logging, get_logger

_logger: structlog.BoundLogger = get_logger(__name__)


def _validate(config: dict[str, Any]) -> None:
    """Reject configurations the resolver cannot run with."""
    fetch = config.get("fetch", {})
    cache = config.get("cache", {})

    url_candidates = fetch.get("url_candidates") or []
    if not url_candidates:
        raise ConfigurationError(message="At least one URL candidate is required")
    for template in url_candidates:
        if "{query}" not in template:
            raise ConfigurationError(message=f"URL candidate lacks a {{query}} placeholder: {template}")

    for section, field in (("fetch", "timeout_ms"), ("cache", "ttl_seconds"), ("cache", "max_entries")):
        value = (fetch if section == "fetch" else cache).get(field)
        if value is not None and value <= 0:
            raise ConfigurationError(message=f"{section}.{field} must be positive, got {value}")


def build_resolver(
    custom_settings: Settings | None = None,
    config_path: str | Path = DEFAULT_CONFIG_PATH,
    http_client: httpx.AsyncClient | None = None,
    store: IKeyValueStore | None = None,
) -> dict[str, Any]:
    """Construct the resolver and its collaborators.

    Parameters
    ----------
    custom_settings:
        Application settings.  A fresh ``Settings()`` if not provided.
    config_path:
        YAML file holding URL candidates and request headers.
    http_client:
        Shared client.  One is created (and owned) when omitted.
    store:
        Key-value store for the persistent cache.  Defaults to SQLite at
        ``cache.db_path``.

    Returns
    -------
    dict
        Component instances keyed by role name: ``resolver``, ``http_client``,
        ``store``, ``cache``, ``session_cache``, ``fetcher``, ``parser``,
        ``config`` and ``owns_http_client``.

    Raises
    ------
    ConfigurationError
        If the merged configuration is unusable.
    """
    s = custom_settings or Settings()
    config = load_config(config_path, settings=s)
    config.setdefault("fetch", {}).setdefault("url_candidates", list(DEFAULT_URL_TEMPLATES))
    _validate(config)

    fetch_cfg = config["fetch"]
    cache_cfg = config.get("cache", {})
    base_url = config.get("vivino", {}).get("base_url", s.vivino_base_url)

    timeout_ms = fetch_cfg.get("timeout_ms", s.fetch_timeout_ms)
    owns_http_client = http_client is None
    if http_client is None:
        # Phase timeouts equal the per-candidate budget the fetcher enforces.
        http_client = httpx.AsyncClient(follow_redirects=True, timeout=httpx.Timeout(timeout_ms / 1000.0))

    kv_store = store
    if kv_store is None:
        kv_store = SQLiteKeyValueStore(db_path=cache_cfg.get("db_path", s.cache_db_path))
    cache = PersistentRatingCache(
        kv_store,
        storage_key=cache_cfg.get("storage_key", s.cache_storage_key),
        ttl=cache_cfg.get("ttl_seconds", s.cache_ttl_seconds),
        max_entries=cache_cfg.get("max_entries", s.max_cache_entries),
    )

    session_size = cache_cfg.get("session_size", s.session_cache_size)
    session_cache = (
        SessionRatingCache(max_size=session_size, ttl=cache_cfg.get("ttl_seconds", s.cache_ttl_seconds))
        if session_size > 0
        else None
    )

    fetcher = RatingPageFetcher(
        http_client=http_client,
        headers=fetch_cfg.get("headers") or DEFAULT_HEADERS,
        min_response_bytes=fetch_cfg.get("min_response_bytes", s.min_response_bytes),
    )
    parser = ParserPipeline.default(base_url=base_url)

    resolver = RatingResolver(
        fetcher=fetcher,
        parser=parser,
        cache=cache,
        url_templates=fetch_cfg["url_candidates"],
        timeout_ms=timeout_ms,
        retain_credentials=fetch_cfg.get("retain_credentials", s.retain_credentials),
        session_cache=session_cache,
    )

    _logger.info(
        "resolver_built",
        store=kv_store.get_provider_name(),
        url_candidates=len(fetch_cfg["url_candidates"]),
        strategies=parser.strategy_names,
        session_cache=session_cache is not None,
    )

    return {
        "resolver": resolver,
        "http_client": http_client,
        "owns_http_client": owns_http_client,
        "store": kv_store,
        "cache": cache,
        "session_cache": session_cache,
        "fetcher": fetcher,
        "parser": parser,
        "config": config,
    }


def configure_from_settings(custom_settings: Settings | None = None) -> None:
    """Configure structlog from ``LOG_LEVEL`` / ``APP_ENV``."""
    s = custom_settings or Settings()
    configure_logging(log_level=s.log_level, json_output=(s.app_env == "production"))


async def shutdown(components: dict[str, Any]) -> None:
    """Close the HTTP clients that :func:`build_resolver` or the fetcher created."""
    fetcher: RatingPageFetcher = components["fetcher"]
    await fetcher.aclose()
    if components.get("owns_http_client"):
        http_client: httpx.AsyncClient = components["http_client"]
        await http_client.aclose()
        _logger.info("resolver_shutdown", message="HTTP client closed")
