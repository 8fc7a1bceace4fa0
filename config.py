import os
from dotenv import load_dotenv

load_dotenv()


def _env_bool(name, default=False):
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ('1', 'true', 'yes', 'on')


def validate_required_env_vars():
    """
    Check that the environment carries what a deployment needs.

    Raises:
        ValueError: Listing every missing variable.
    """
    required = ['SECRET_KEY', 'SPOTIFY_CLIENT_ID', 'SPOTIFY_CLIENT_SECRET']
    missing = [name for name in required if not os.getenv(name)]
    if missing:
        raise ValueError(
            f"Missing required environment variables: {', '.join(missing)}"
        )


class Config:
    """Base configuration."""
    SECRET_KEY = os.getenv('SECRET_KEY', os.urandom(24).hex())
    SPOTIFY_CLIENT_ID = os.getenv('SPOTIFY_CLIENT_ID')
    SPOTIFY_CLIENT_SECRET = os.getenv('SPOTIFY_CLIENT_SECRET')

    # Spotify Web API
    SPOTIFY_MARKET = os.getenv('SPOTIFY_MARKET', 'US')
    SPOTIFY_REQUEST_TIMEOUT = float(os.getenv('SPOTIFY_REQUEST_TIMEOUT', 10))
    SPOTIFY_TOKEN_EXPIRY_MARGIN = int(os.getenv('SPOTIFY_TOKEN_EXPIRY_MARGIN', 300))
    PLAYLIST_FETCH_ALL_PAGES = _env_bool('PLAYLIST_FETCH_ALL_PAGES')

    # Response cache
    CACHE_DEFAULT_TTL = int(os.getenv('CACHE_DEFAULT_TTL', 300))  # 5 minutes
    CACHE_KEY_PREFIX = os.getenv('CACHE_KEY_PREFIX', 'spotinote:cache:')
    REDIS_URL = os.getenv('REDIS_URL')

    # Settings blob (credentials, display preferences, last token)
    SETTINGS_PATH = os.getenv('SETTINGS_PATH', './data/settings.json')

    # Application settings
    DEBUG = False
    TESTING = False
    PORT = int(os.getenv('PORT', 8000))
    HOST = os.getenv('HOST', '0.0.0.0')

class ProductionConfig(Config):
    """Production configuration."""
    pass

class DevelopmentConfig(Config):
    """Development configuration."""
    DEBUG = True
    TESTING = False
    PORT = 8000
    HOST = 'localhost'

class TestingConfig(Config):
    """Testing configuration."""
    TESTING = True
    DEBUG = True
    SECRET_KEY = 'test-secret-key'
    SPOTIFY_CLIENT_ID = 'test_client_id'
    SPOTIFY_CLIENT_SECRET = 'test_client_secret'
    REDIS_URL = None
    SETTINGS_PATH = os.getenv('TEST_SETTINGS_PATH', './.pytest_settings.json')
    PORT = 8000
    HOST = 'localhost'

# Dictionary for easy config selection
config = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig,
    'default': DevelopmentConfig
}
