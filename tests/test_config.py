"""
Tests for configuration module.

Tests cover Config classes, environment variable validation and
environment-driven defaults.
"""

import pytest
import os
from unittest.mock import patch

from config import (
    Config,
    DevelopmentConfig,
    ProductionConfig,
    TestingConfig,
    config,
    validate_required_env_vars,
)


class TestConfigClass:
    """Test base Config class."""

    def test_config_has_required_attributes(self):
        for name in (
            'SECRET_KEY',
            'SPOTIFY_CLIENT_ID',
            'SPOTIFY_CLIENT_SECRET',
            'SPOTIFY_MARKET',
            'SPOTIFY_REQUEST_TIMEOUT',
            'CACHE_DEFAULT_TTL',
            'SETTINGS_PATH',
        ):
            assert hasattr(Config, name)

    def test_token_margin_is_five_minutes_by_default(self):
        if 'SPOTIFY_TOKEN_EXPIRY_MARGIN' not in os.environ:
            assert Config.SPOTIFY_TOKEN_EXPIRY_MARGIN == 300

    def test_production_is_not_debug(self):
        assert ProductionConfig.DEBUG is False
        assert ProductionConfig.TESTING is False

    def test_development_is_debug(self):
        assert DevelopmentConfig.DEBUG is True

    def test_testing_config(self):
        assert TestingConfig.TESTING is True
        assert TestingConfig.REDIS_URL is None
        assert TestingConfig.SPOTIFY_CLIENT_ID == 'test_client_id'

    def test_config_lookup(self):
        assert config['production'] is ProductionConfig
        assert config['default'] is DevelopmentConfig


class TestValidateRequiredEnvVars:
    """Tests for validate_required_env_vars()."""

    @patch.dict(os.environ, {
        'SECRET_KEY': 'k',
        'SPOTIFY_CLIENT_ID': 'id',
        'SPOTIFY_CLIENT_SECRET': 'secret',
    }, clear=True)
    def test_passes_when_all_present(self):
        validate_required_env_vars()

    @patch.dict(os.environ, {'SECRET_KEY': 'k'}, clear=True)
    def test_lists_every_missing_variable(self):
        with pytest.raises(ValueError) as exc_info:
            validate_required_env_vars()

        message = str(exc_info.value)
        assert 'SPOTIFY_CLIENT_ID' in message
        assert 'SPOTIFY_CLIENT_SECRET' in message
        assert 'SECRET_KEY' not in message

    @patch.dict(os.environ, {
        'SECRET_KEY': '',
        'SPOTIFY_CLIENT_ID': 'id',
        'SPOTIFY_CLIENT_SECRET': 'secret',
    }, clear=True)
    def test_empty_value_counts_as_missing(self):
        with pytest.raises(ValueError, match='SECRET_KEY'):
            validate_required_env_vars()
