"""Configuration module: exports Settings and load_config."""

from vivino_rating.config.loader import load_config
from vivino_rating.config.settings import Settings

__all__ = ["Settings", "load_config"]
