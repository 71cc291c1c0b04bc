"""Environment-driven settings for the deck analytics engine."""

import os
from dataclasses import dataclass
from functools import lru_cache

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


DEFAULT_META_CACHE_TTL = 900  # 15 minutes
DEFAULT_PLAY_ADVANTAGE = 0.05
DEFAULT_FORMAT = "standard"

_TRUE_VALUES = ("true", "1", "yes")


def env_flag(name: str, default: bool) -> bool:
    """Read a boolean environment variable."""
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in _TRUE_VALUES


@dataclass(frozen=True)
class EngineSettings:
    """Runtime settings shared by the engine and the API."""

    log_level: str
    log_to_file: bool
    meta_cache_enabled: bool
    meta_cache_ttl: int
    meta_cache_max_entries: int
    play_advantage: float
    default_format: str


@lru_cache(maxsize=1)
def get_settings() -> EngineSettings:
    """Load settings from environment variables.

    Returns:
        EngineSettings populated from the environment with defaults.
    """
    return EngineSettings(
        log_level=os.getenv("LOG_LEVEL", "INFO"),
        log_to_file=env_flag("LOG_TO_FILE", False),
        meta_cache_enabled=env_flag("META_CACHE_ENABLED", True),
        meta_cache_ttl=int(os.getenv("META_CACHE_TTL_SECONDS", str(DEFAULT_META_CACHE_TTL))),
        meta_cache_max_entries=int(os.getenv("META_CACHE_MAX_ENTRIES", "16")),
        play_advantage=float(os.getenv("SIM_PLAY_ADVANTAGE", str(DEFAULT_PLAY_ADVANTAGE))),
        default_format=os.getenv("DEFAULT_FORMAT", DEFAULT_FORMAT),
    )


def clear_settings_cache() -> None:
    """Clear the cached settings.

    Useful for testing when environment variables change.
    """
    get_settings.cache_clear()
