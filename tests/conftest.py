"""
Pytest configuration and shared fixtures for Spotinote tests.

This module provides common fixtures used across all test modules,
including fake Spotify payloads, a controllable clock and a Flask app
backed by a temporary settings file.
"""

import pytest
import time

from spotinote.spotify.auth import TokenInfo
from spotinote.spotify.credentials import SpotifyCredentials


# =============================================================================
# Helpers
# =============================================================================


class FakeClock:
    """Manually advanced time source."""

    def __init__(self, start=1_700_000_000.0):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


# =============================================================================
# Sample Data Fixtures
# =============================================================================

@pytest.fixture
def clock():
    """A controllable clock starting at a fixed instant."""
    return FakeClock()


@pytest.fixture
def credentials():
    """Valid application credentials."""
    return SpotifyCredentials(
        client_id='test_client_id',
        client_secret='test_client_secret',
    )


@pytest.fixture
def token_response():
    """Body returned by the token endpoint."""
    return {
        'access_token': 'test_access_token_12345',
        'token_type': 'Bearer',
        'expires_in': 3600,
    }


@pytest.fixture
def valid_token():
    """A token valid for the next hour."""
    return TokenInfo(
        access_token='test_access_token_12345',
        expires_at=time.time() + 3600,
    )


@pytest.fixture
def sample_track():
    """Sample Spotify track object."""
    return {
        'id': '4iV5W9uYEdYUVa79Axb7Rh',
        'name': 'Never Gonna Give You Up',
        'duration_ms': 213573,
        'popularity': 77,
        'artists': [{'id': 'artist1', 'name': 'Rick Astley'}],
        'album': {
            'id': 'album1',
            'name': 'Whenever You Need Somebody',
            'images': [{'url': 'https://i.scdn.co/image/album1.jpg'}],
        },
    }


@pytest.fixture
def sample_album():
    """Sample Spotify album object (metadata request)."""
    return {
        'id': '4aawyAB9vmqN3uQ7FjRGTy',
        'name': 'Global Warming',
        'release_date': '2012-11-16',
        'total_tracks': 3,
        'artists': [{'name': 'Pitbull'}],
        'images': [{'url': 'https://i.scdn.co/image/global.jpg'}],
        'tracks': {'items': [], 'total': 3},
    }


@pytest.fixture
def sample_album_tracks():
    """Sample album tracks page."""
    return {
        'items': [
            {
                'name': f'Song {i}',
                'duration_ms': 200000 + i * 1000,
                'artists': [{'name': 'Pitbull'}],
            }
            for i in range(1, 4)
        ],
        'next': None,
    }


@pytest.fixture
def sample_artist():
    """Sample Spotify artist object."""
    return {
        'id': '0TnOYISbd1XYRBk9myaseg',
        'name': 'Pitbull',
        'followers': {'total': 1234567},
        'genres': ['dance pop', 'miami hip hop'],
        'popularity': 85,
        'images': [{'url': 'https://i.scdn.co/image/pitbull.jpg'}],
    }


@pytest.fixture
def sample_playlist():
    """Sample Spotify playlist with a next page and a removed track."""
    return {
        'id': '37i9dQZF1DXcBWIGoYBM5M',
        'name': "Today's Top Hits",
        'description': 'The hottest tracks right now.',
        'owner': {'display_name': 'Spotify'},
        'images': [{'url': 'https://i.scdn.co/image/tth.jpg'}],
        'tracks': {
            'total': 4,
            'items': [
                {'track': {'name': 'Hit 1', 'duration_ms': 180000, 'artists': [{'name': 'A'}]}},
                {'track': None},
            ],
            'next': 'https://api.spotify.com/v1/playlists/37i9dQZF1DXcBWIGoYBM5M/tracks?offset=2&limit=2',
        },
    }


# =============================================================================
# Flask App Fixtures
# =============================================================================

@pytest.fixture
def app(tmp_path, monkeypatch):
    """Create a Flask application for testing."""
    monkeypatch.setenv('SPOTIFY_CLIENT_ID', 'test_client_id')
    monkeypatch.setenv('SPOTIFY_CLIENT_SECRET', 'test_client_secret')
    monkeypatch.setenv('SECRET_KEY', 'test-secret-key-for-testing')

    from config import TestingConfig
    monkeypatch.setattr(TestingConfig, 'SETTINGS_PATH', str(tmp_path / 'settings.json'))

    from spotinote import create_app
    app = create_app('testing')
    yield app
    app.extensions['spotinote']['client'].close()


@pytest.fixture
def client(app):
    """Flask test client."""
    return app.test_client()
