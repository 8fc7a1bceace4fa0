"""
Tests for Flask app factory and Redis initialization.

Tests cover create_app, response cache backend selection and the
settings store wiring.
"""

import pytest
import os
from unittest.mock import MagicMock, patch
import redis

from spotinote.spotify.cache import InMemoryResponseCache, RedisResponseCache


@pytest.fixture
def settings_path(tmp_path, monkeypatch):
    """Point every config class at a temporary settings file."""
    from config import Config

    path = str(tmp_path / 'settings.json')
    monkeypatch.setattr(Config, 'SETTINGS_PATH', path)
    monkeypatch.setattr('config.TestingConfig.SETTINGS_PATH', path)
    return path


ENV = {
    'SECRET_KEY': 'test-secret-key',
    'SPOTIFY_CLIENT_ID': 'test_id',
    'SPOTIFY_CLIENT_SECRET': 'test_secret',
}


def _close(app):
    app.extensions['spotinote']['client'].close()


class TestCreateApp:
    """Tests for create_app function."""

    @patch.dict(os.environ, ENV)
    def test_create_app_development_config(self, settings_path):
        from spotinote import create_app
        app = create_app('development')

        assert app.config['DEBUG'] is True
        _close(app)

    @patch.dict(os.environ, dict(ENV, FLASK_ENV='testing'))
    def test_create_app_uses_flask_env_default(self, settings_path):
        from spotinote import create_app
        app = create_app()

        assert app.config['TESTING'] is True
        _close(app)

    @patch.dict(os.environ, ENV)
    def test_unknown_config_name_falls_back_to_production(self, settings_path):
        from spotinote import create_app
        app = create_app('staging')

        assert app.config['DEBUG'] is False
        _close(app)

    @patch.dict(os.environ, {}, clear=True)
    def test_production_fails_fast_without_env(self, settings_path):
        from spotinote import create_app

        with pytest.raises(ValueError, match='Missing required environment variables'):
            create_app('production')

    @patch.dict(os.environ, {}, clear=True)
    def test_testing_continues_without_env(self, settings_path):
        from spotinote import create_app
        app = create_app('testing')

        assert 'client' in app.extensions['spotinote']
        _close(app)

    @patch.dict(os.environ, ENV)
    def test_wires_embed_service(self, settings_path):
        from spotinote import create_app
        app = create_app('testing')
        state = app.extensions['spotinote']

        assert state['embed_service'].client is state['client']
        assert state['settings_store'].path == settings_path
        _close(app)


class TestCacheBackend:
    """Tests for Redis selection in create_app."""

    @patch.dict(os.environ, ENV)
    def test_no_redis_url_uses_memory_cache(self, settings_path):
        from spotinote import create_app
        app = create_app('testing')

        assert app.extensions['spotinote']['redis'] is None
        assert isinstance(app.extensions['spotinote']['client'].cache, InMemoryResponseCache)
        _close(app)

    @patch.dict(os.environ, ENV)
    def test_redis_url_uses_redis_cache(self, settings_path, monkeypatch):
        from config import TestingConfig
        from spotinote import create_app

        monkeypatch.setattr(TestingConfig, 'REDIS_URL', 'redis://localhost:6379/0')
        mock_redis = MagicMock(spec=redis.Redis)
        mock_redis.ping.return_value = True

        with patch('spotinote._create_redis_client', return_value=mock_redis):
            app = create_app('testing')

        assert app.extensions['spotinote']['redis'] is mock_redis
        assert isinstance(app.extensions['spotinote']['client'].cache, RedisResponseCache)
        _close(app)

    @patch.dict(os.environ, ENV)
    def test_unreachable_redis_falls_back(self, settings_path, monkeypatch):
        from config import TestingConfig
        from spotinote import create_app

        monkeypatch.setattr(TestingConfig, 'REDIS_URL', 'redis://localhost:6379/0')
        mock_redis = MagicMock(spec=redis.Redis)
        mock_redis.ping.side_effect = redis.ConnectionError('refused')

        with patch('spotinote._create_redis_client', return_value=mock_redis):
            app = create_app('testing')

        assert app.extensions['spotinote']['redis'] is None
        assert isinstance(app.extensions['spotinote']['client'].cache, InMemoryResponseCache)
        _close(app)


class TestInstallClient:
    """Tests for install_client()."""

    @patch.dict(os.environ, ENV)
    def test_rebuild_closes_previous_client(self, settings_path):
        from spotinote import create_app, install_client
        app = create_app('testing')
        previous = app.extensions['spotinote']['client']

        with patch.object(previous, 'close') as mock_close:
            new_client = install_client(app)

        assert new_client is not previous
        mock_close.assert_called_once()
        _close(app)
