"""YAML configuration loader with environment variable overrides.

Configuration is loaded in layers (later layers override earlier):

  1. config/config.yaml  -- URL candidate templates, headers and limits
  2. .env file           -- local overrides (not committed)
  3. Environment vars    -- deployment overrides

Only Settings fields that were actually supplied (env var, .env entry or
constructor argument) are merged over the YAML; a field left at its class
default never masks a YAML value::

    base      = {"fetch": {"headers": {...}, "timeout_ms": 10000}}
    overrides = {"fetch": {"timeout_ms": 12000}}   # FETCH_TIMEOUT_MS=12000
    result    = {"fetch": {"headers": {...}, "timeout_ms": 12000}}

Consumers fall back to the Settings defaults for keys neither layer provides.
"""

from pathlib import Path

import yaml

from vivino_rating.config.settings import Settings

DEFAULT_CONFIG_PATH = Path("config/config.yaml")

# Settings field -> (section, key) in the merged config.
_OVERRIDE_PATHS: dict[str, tuple[str, str]] = {
    "app_env": ("app", "env"),
    "cache_ttl_seconds": ("cache", "ttl_seconds"),
    "max_cache_entries": ("cache", "max_entries"),
    "cache_storage_key": ("cache", "storage_key"),
    "cache_db_path": ("cache", "db_path"),
    "session_cache_size": ("cache", "session_size"),
    "url_candidates": ("fetch", "url_candidates"),
    "fetch_timeout_ms": ("fetch", "timeout_ms"),
    "min_response_bytes": ("fetch", "min_response_bytes"),
    "retain_credentials": ("fetch", "retain_credentials"),
    "vivino_base_url": ("vivino", "base_url"),
    "log_level": ("logging", "level"),
}


def load_config(path: str | Path = DEFAULT_CONFIG_PATH, settings: Settings | None = None) -> dict:
    """Load YAML config and merge the explicitly set Settings on top.

    An empty ``url_candidates`` setting leaves the YAML list in place.

    Args:
        path: Path to the YAML configuration file.
        settings: Settings to merge; a fresh ``Settings()`` when omitted.

    Returns:
        Fully resolved configuration dictionary.
    """
    config_path = Path(path)
    if config_path.exists():
        with open(config_path, encoding="utf-8") as f:
            yaml_config = yaml.safe_load(f) or {}
    else:
        yaml_config = {}

    settings = settings or Settings()
    _deep_merge(yaml_config, _env_overrides(settings))
    return yaml_config


def _env_overrides(settings: Settings) -> dict:
    overrides: dict = {}
    for field, value in settings.model_dump(exclude_unset=True).items():
        if field not in _OVERRIDE_PATHS:
            continue
        if field == "url_candidates" and not value:
            continue
        section, key = _OVERRIDE_PATHS[field]
        overrides.setdefault(section, {})[key] = value
    return overrides


def _deep_merge(base: dict, overrides: dict) -> None:
    """Recursively merge overrides into base dict, mutating base in place."""
    for key, value in overrides.items():
        if key in base and isinstance(base[key], dict) and isinstance(value, dict):
            _deep_merge(base[key], value)
        else:
            base[key] = value
