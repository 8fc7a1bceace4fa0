"""
Spotinote client facade.

One explicit object owning the credential manager, HTTP client, response
cache and data fetcher. Build it once per process and pass it to whatever
needs Spotify data; nothing here relies on module-level state.
"""

import logging
from typing import TYPE_CHECKING, Any, Mapping, Optional

from .auth import DEFAULT_TIMEOUT, TOKEN_EXPIRY_MARGIN, CredentialManager, TokenInfo
from .cache import DEFAULT_TTL, InMemoryResponseCache, RedisResponseCache, ResponseCache
from .credentials import SpotifyCredentials
from .exceptions import SpotifyAuthError
from .fetcher import DEFAULT_MARKET, DataFetcher
from .http_client import SpotifyHTTPClient

if TYPE_CHECKING:
    import redis

    from spotinote.results import FetchResult
    from spotinote.schemas.descriptors import RequestDescriptor
    from spotinote.services.settings_store import SettingsStore

logger = logging.getLogger(__name__)


class SpotinoteClient:
    """
    Unified client for embed data.

    Example:
        credentials = SpotifyCredentials.from_env()
        client = SpotinoteClient(credentials)
        track = client.fetch(TrackDescriptor(id="4iV5W9uYEdYUVa79Axb7Rh"))

    Example with injected collaborators:
        manager = CredentialManager(credentials, token_store=store)
        http = SpotifyHTTPClient(manager, timeout=5)
        client = SpotinoteClient.from_parts(manager, http, InMemoryResponseCache())
    """

    def __init__(
        self,
        credentials: Optional[SpotifyCredentials],
        cache: Optional[ResponseCache] = None,
        token_store: Optional["SettingsStore"] = None,
        market: str = DEFAULT_MARKET,
        timeout: float = DEFAULT_TIMEOUT,
        token_margin: float = TOKEN_EXPIRY_MARGIN,
    ):
        """
        Initialize the client.

        Args:
            credentials: Application credentials (None if unconfigured;
                every fetch then fails with SpotifyAuthError).
            cache: Response cache; defaults to a 5-minute in-memory cache.
            token_store: Durable store for the last access token.
            market: Market used for artist top tracks and albums.
            timeout: Per-request timeout in seconds.
            token_margin: Safety margin subtracted from token expiry.
        """
        credential_manager = CredentialManager(
            credentials,
            token_store=token_store,
            margin=token_margin,
            timeout=timeout,
        )
        http_client = SpotifyHTTPClient(credential_manager, timeout=timeout)
        self._wire(
            credential_manager,
            http_client,
            cache if cache is not None else InMemoryResponseCache(),
            market,
        )

    def _wire(
        self,
        credential_manager: CredentialManager,
        http_client: SpotifyHTTPClient,
        cache: ResponseCache,
        market: str,
    ) -> None:
        self._credential_manager = credential_manager
        self._http_client = http_client
        self._cache = cache
        self._fetcher = DataFetcher(http_client, cache, market=market)

    @classmethod
    def from_parts(
        cls,
        credential_manager: CredentialManager,
        http_client: SpotifyHTTPClient,
        cache: ResponseCache,
        market: str = DEFAULT_MARKET,
    ) -> "SpotinoteClient":
        """Assemble a client from already-built collaborators."""
        client = cls.__new__(cls)
        client._wire(credential_manager, http_client, cache, market)
        return client

    @classmethod
    def from_config(
        cls,
        config: Mapping[str, Any],
        settings_store: Optional["SettingsStore"] = None,
        redis_client: Optional["redis.Redis"] = None,
    ) -> "SpotinoteClient":
        """
        Build a client from Flask-style config.

        Credentials saved in the settings blob win over the environment.
        A Redis client, when given, backs the response cache.

        Args:
            config: Flask application config (or any mapping).
            settings_store: Optional settings store for credentials and
                token persistence.
            redis_client: Optional Redis client for a shared cache.
        """
        credentials = _resolve_credentials(config, settings_store)
        ttl = int(config.get("CACHE_DEFAULT_TTL", DEFAULT_TTL))

        if redis_client is not None:
            cache: ResponseCache = RedisResponseCache(
                redis_client,
                key_prefix=config.get("CACHE_KEY_PREFIX", "spotinote:cache:"),
                ttl=ttl,
            )
        else:
            cache = InMemoryResponseCache(ttl=ttl)

        return cls(
            credentials,
            cache=cache,
            token_store=settings_store,
            market=config.get("SPOTIFY_MARKET", DEFAULT_MARKET),
            timeout=float(config.get("SPOTIFY_REQUEST_TIMEOUT", DEFAULT_TIMEOUT)),
            token_margin=float(
                config.get("SPOTIFY_TOKEN_EXPIRY_MARGIN", TOKEN_EXPIRY_MARGIN)
            ),
        )

    # -----------------------------------------------------------------
    # Collaborators
    # -----------------------------------------------------------------

    @property
    def credential_manager(self) -> CredentialManager:
        return self._credential_manager

    @property
    def http_client(self) -> SpotifyHTTPClient:
        return self._http_client

    @property
    def cache(self) -> ResponseCache:
        return self._cache

    @property
    def fetcher(self) -> DataFetcher:
        return self._fetcher

    # -----------------------------------------------------------------
    # Operations
    # -----------------------------------------------------------------

    def fetch(self, descriptor: "RequestDescriptor") -> Any:
        """Fetch (or return cached) data for a descriptor."""
        return self._fetcher.fetch(descriptor)

    def fetch_result(self, descriptor: "RequestDescriptor") -> "FetchResult":
        """Fetch and report the outcome as a FetchResult."""
        return self._fetcher.fetch_result(descriptor)

    def authenticate(self) -> TokenInfo:
        """Force a new client-credentials exchange."""
        return self._credential_manager.authenticate()

    def clear_cache(self) -> None:
        self._cache.clear()

    def close(self) -> None:
        """Release the HTTP session and worker pool."""
        self._fetcher.close()
        self._http_client.close()


def _resolve_credentials(
    config: Mapping[str, Any], settings_store: Optional["SettingsStore"]
) -> Optional[SpotifyCredentials]:
    if settings_store is not None:
        settings = settings_store.load()
        if settings.has_credentials:
            try:
                return SpotifyCredentials.from_settings(settings)
            except SpotifyAuthError as e:
                logger.warning("Stored Spotify credentials are invalid: %s", e)

    try:
        return SpotifyCredentials.from_flask_config(dict(config))
    except SpotifyAuthError:
        logger.warning(
            "Spotify credentials not configured. Embeds will show an "
            "authentication error until SPOTIFY_CLIENT_ID and "
            "SPOTIFY_CLIENT_SECRET are set."
        )
        return None
