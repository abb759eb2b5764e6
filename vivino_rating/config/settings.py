"""Application settings loaded from environment variables via pydantic-settings.

Values are read from, in priority order:

  1. Environment variables, e.g. ``CACHE_TTL_SECONDS=3600``
  2. A ``.env`` file in the working directory
  3. The defaults below

Field ``max_cache_entries`` maps to env var ``MAX_CACHE_ENTRIES`` and so on.
List fields (``url_candidates``) are given as JSON in the environment.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Rating resolver settings.

    Environment variables override defaults. Loaded from .env file when present.
    """

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # === Cache ===
    cache_ttl_seconds: int = 6 * 60 * 60
    max_cache_entries: int = 200
    cache_storage_key: str = "vivinoRatingCache"
    cache_db_path: str = "data/rating_cache.db"
    session_cache_size: int = 500  # 0 disables the in-process session layer

    # === Fetching ===
    vivino_base_url: str = "https://www.vivino.com"
    url_candidates: list[str] = []  # empty = use config.yaml / built-in templates
    fetch_timeout_ms: int = 12_000
    min_response_bytes: int = 200
    retain_credentials: bool = True

    # === App Config ===
    app_env: str = "development"
    log_level: str = "INFO"
