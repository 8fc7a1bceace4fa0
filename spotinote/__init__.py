import os
import logging
from typing import Optional
from flask import Flask
import redis
from config import config, validate_required_env_vars

logging.basicConfig(level=logging.DEBUG)
logger = logging.getLogger(__name__)

# urllib3 logs every connection at DEBUG.
logging.getLogger("urllib3").setLevel(logging.WARNING)


def _create_redis_client(redis_url: str) -> redis.Redis:
    """
    Create a Redis client from URL.

    Args:
        redis_url: Redis connection URL.

    Returns:
        Redis client instance.
    """
    return redis.from_url(redis_url, decode_responses=False)


def _connect_redis(app: Flask) -> Optional[redis.Redis]:
    redis_url = app.config.get("REDIS_URL")
    if not redis_url:
        logger.info("REDIS_URL not configured. Using in-memory response cache.")
        return None
    try:
        redis_client = _create_redis_client(redis_url)
        # Test the connection
        redis_client.ping()
        logger.info("Redis response cache enabled: %s", redis_url.split("@")[-1])
        return redis_client
    except redis.RedisError as e:
        logger.warning(
            "Redis connection failed: %s. Falling back to in-memory cache.", e
        )
        return None


def _create_settings_store(app: Flask):
    from spotinote.services import SecretCipher, SecretEncryptionError, SettingsStore

    cipher = None
    try:
        cipher = SecretCipher(app.config["SECRET_KEY"])
        logger.info("Settings encryption initialized")
    except SecretEncryptionError as e:
        logger.warning(
            "Settings encryption init failed: %s. "
            "Secrets will be stored in plaintext.",
            e,
        )
    return SettingsStore(app.config["SETTINGS_PATH"], cipher=cipher)


def install_client(app: Flask):
    """
    Build (or rebuild) the SpotinoteClient and EmbedService for an app.

    Called once from create_app and again whenever the stored credentials
    change. The previous client, if any, is closed.

    Returns:
        The new SpotinoteClient.
    """
    from spotinote.services import EmbedService
    from spotinote.spotify import SpotinoteClient

    state = app.extensions.setdefault("spotinote", {})
    previous = state.get("client")

    store = state["settings_store"]
    client = SpotinoteClient.from_config(
        app.config,
        settings_store=store,
        redis_client=state.get("redis"),
    )
    state["client"] = client
    state["embed_service"] = EmbedService(
        client,
        settings_provider=store.load,
        fetch_all_pages=app.config.get("PLAYLIST_FETCH_ALL_PAGES", False),
    )

    if previous is not None:
        previous.clear_cache()
        previous.close()
    return client


def create_app(config_name=None):
    """Create and configure the Flask application."""
    if config_name is None:
        config_name = os.getenv("FLASK_ENV", "production")

    # Ensure config_name is a string
    if not isinstance(config_name, str) or config_name not in config:
        config_name = "production"

    logger.info("Creating app with config: %s", config_name)

    # Validate required environment variables
    try:
        validate_required_env_vars()
        logger.info("Environment validation passed")
    except ValueError as e:
        logger.error("Environment validation failed: %s", str(e))
        if config_name == "production":
            raise  # Fail fast in production
        else:
            logger.warning(
                "Continuing in %s mode with missing environment variables",
                config_name,
            )

    app = Flask(__name__)

    # Load config
    app.config.from_object(config[config_name])

    logger.info("SPOTIFY_MARKET: %s", app.config.get("SPOTIFY_MARKET"))
    logger.info("CACHE_DEFAULT_TTL: %ss", app.config.get("CACHE_DEFAULT_TTL"))

    state = app.extensions.setdefault("spotinote", {})
    state["redis"] = _connect_redis(app)
    state["settings_store"] = _create_settings_store(app)
    install_client(app)

    # Register blueprints
    from spotinote.routes import main as main_blueprint

    app.register_blueprint(main_blueprint)

    # Register global error handlers
    from spotinote.error_handlers import register_error_handlers

    register_error_handlers(app)

    return app
