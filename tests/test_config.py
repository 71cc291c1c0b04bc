"""Tests for engine settings."""

import os
from unittest.mock import patch

import pytest

from deck_analytics.core.config import (
    DEFAULT_FORMAT,
    DEFAULT_META_CACHE_TTL,
    DEFAULT_PLAY_ADVANTAGE,
    clear_settings_cache,
    env_flag,
    get_settings,
)


@pytest.fixture(autouse=True)
def clear_cache():
    """Clear the settings cache before and after each test."""
    clear_settings_cache()
    yield
    clear_settings_cache()


class TestGetSettings:
    """Tests for get_settings function."""

    def test_default_values(self):
        """Settings use defaults when environment variables are not set."""
        with patch.dict(os.environ, {}, clear=True):
            settings = get_settings()

        assert settings.log_level == "INFO"
        assert settings.log_to_file is False
        assert settings.meta_cache_enabled is True
        assert settings.meta_cache_ttl == DEFAULT_META_CACHE_TTL
        assert settings.meta_cache_max_entries == 16
        assert settings.play_advantage == DEFAULT_PLAY_ADVANTAGE
        assert settings.default_format == DEFAULT_FORMAT

    def test_overrides(self):
        """Environment variables override every default."""
        env = {
            "LOG_LEVEL": "DEBUG",
            "LOG_TO_FILE": "true",
            "META_CACHE_ENABLED": "0",
            "META_CACHE_TTL_SECONDS": "30",
            "META_CACHE_MAX_ENTRIES": "4",
            "SIM_PLAY_ADVANTAGE": "0.1",
            "DEFAULT_FORMAT": "advanced",
        }
        with patch.dict(os.environ, env, clear=True):
            settings = get_settings()

        assert settings.log_level == "DEBUG"
        assert settings.log_to_file is True
        assert settings.meta_cache_enabled is False
        assert settings.meta_cache_ttl == 30
        assert settings.meta_cache_max_entries == 4
        assert settings.play_advantage == 0.1
        assert settings.default_format == "advanced"

    def test_cached(self):
        """Settings are loaded once until the cache is cleared."""
        with patch.dict(os.environ, {"LOG_LEVEL": "WARNING"}, clear=True):
            first = get_settings()
        with patch.dict(os.environ, {"LOG_LEVEL": "ERROR"}, clear=True):
            assert get_settings() is first
            clear_settings_cache()
            assert get_settings().log_level == "ERROR"


class TestEnvFlag:
    """Tests for boolean environment parsing."""

    @pytest.mark.parametrize("raw", ["true", "TRUE", "1", "yes", " Yes "])
    def test_truthy(self, raw):
        """Recognised truthy strings parse as True."""
        with patch.dict(os.environ, {"FLAG": raw}, clear=True):
            assert env_flag("FLAG", False) is True

    @pytest.mark.parametrize("raw", ["false", "0", "no", ""])
    def test_falsy(self, raw):
        """Anything else parses as False."""
        with patch.dict(os.environ, {"FLAG": raw}, clear=True):
            assert env_flag("FLAG", True) is False

    def test_missing_uses_default(self):
        """An unset variable falls back to the default."""
        with patch.dict(os.environ, {}, clear=True):
            assert env_flag("FLAG", True) is True
