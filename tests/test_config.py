"""
Tests for config.py - Configuration management.
"""

import os
from pathlib import Path
from unittest.mock import patch

import pytest

import sys
sys.path.insert(0, str(Path(__file__).parent.parent))

from golf_matchups.config import Config, get_config, DEFAULT_COURSE_FIT_WEIGHT


CLEAN_ENV = {
    "COURSE_FIT_API_URL": "",
    "COURSE_FIT_API_KEY": "",
    "COURSE_FIT_TIMEOUT": "5",
    "COURSE_FIT_MAX_WORKERS": "8",
    "COURSE_FIT_WEIGHT": str(DEFAULT_COURSE_FIT_WEIGHT),
    "GOLF_MATCHUPS_LOG_LEVEL": "info",
}


class TestConfig:
    """Tests for Config class."""

    def test_config_loads_defaults(self):
        """Test that config loads with default values."""
        with patch.object(Config, '__post_init__', lambda self: None):
            config = Config()
            assert config.course_fit_timeout == 5.0
            assert config.course_fit_max_workers == 8
            assert config.course_fit_weight == DEFAULT_COURSE_FIT_WEIGHT
            assert config.log_level == "INFO"

    def test_config_loads_env_vars(self):
        """Test that config loads environment variables."""
        with patch.dict(os.environ, {
            **CLEAN_ENV,
            "COURSE_FIT_API_URL": "https://coursefit.example.com/api",
            "COURSE_FIT_API_KEY": "test_key",
            "COURSE_FIT_TIMEOUT": "2.5",
            "COURSE_FIT_MAX_WORKERS": "3",
            "GOLF_MATCHUPS_LOG_LEVEL": "debug",
        }, clear=False):
            config = get_config()
            assert config.course_fit_api_url == "https://coursefit.example.com/api"
            assert config.course_fit_api_key == "test_key"
            assert config.course_fit_timeout == 2.5
            assert config.course_fit_max_workers == 3
            assert config.log_level == "DEBUG"
            assert config.is_configured()

    def test_config_no_hardcoded_credentials(self):
        """Test that no service credentials are hardcoded as defaults."""
        with patch.dict(os.environ, CLEAN_ENV, clear=False):
            config = Config()
            assert config.course_fit_api_url == ""
            assert config.course_fit_api_key == ""
            assert not config.is_configured()

    def test_bad_numeric_setting_raises(self):
        """Test that a non-numeric env value is reported clearly."""
        with patch.dict(os.environ, {**CLEAN_ENV, "COURSE_FIT_TIMEOUT": "soon"}, clear=False):
            with pytest.raises(ValueError, match="Invalid numeric setting"):
                Config()


class TestValidateConfig:
    """Tests for validate_config."""

    def test_valid_without_course_fit(self):
        """Test that the course fit service is optional by default."""
        with patch.dict(os.environ, CLEAN_ENV, clear=False):
            assert Config().validate_config() == []

    def test_missing_course_fit_url(self):
        """Test validate_config returns error when the URL is required but missing."""
        with patch.dict(os.environ, CLEAN_ENV, clear=False):
            errors = Config().validate_config(require_course_fit=True)
            assert len(errors) == 1
            assert "COURSE_FIT_API_URL" in errors[0]

    def test_bad_values_reported(self):
        """Test that out-of-range settings are all reported."""
        with patch.dict(os.environ, {
            **CLEAN_ENV,
            "COURSE_FIT_TIMEOUT": "0",
            "COURSE_FIT_MAX_WORKERS": "0",
            "COURSE_FIT_WEIGHT": "-1",
        }, clear=False):
            errors = Config().validate_config()
            assert len(errors) == 3
