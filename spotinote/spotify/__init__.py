"""
Spotify Web API integration module.

This module provides the app-only (client-credentials) authentication,
HTTP transport, response caching and content-type dispatch behind every
embed.

Architecture:
    - credentials.py: SpotifyCredentials for config/DI
    - auth.py: CredentialManager and TokenInfo for token lifecycle
    - http_client.py: SpotifyHTTPClient for authenticated requests
    - cache.py: InMemoryResponseCache / RedisResponseCache
    - fetcher.py: DataFetcher for per-type and composite fetches
    - client.py: SpotinoteClient facade owning all of the above
    - url_parser.py: URL/URI to resource id extraction
    - exceptions.py: Exception hierarchy

Usage:
    from spotinote.spotify import SpotinoteClient, SpotifyCredentials
    from spotinote.schemas import TrackDescriptor

    client = SpotinoteClient(SpotifyCredentials.from_env())
    track = client.fetch(TrackDescriptor(id="4iV5W9uYEdYUVa79Axb7Rh"))
"""

# Credentials (for dependency injection)
from .credentials import SpotifyCredentials

# Auth (token management)
from .auth import (
    CredentialManager,
    TokenInfo,
    TOKEN_EXPIRY_MARGIN,
)

# Transport
from .http_client import SpotifyHTTPClient

# Cache
from .cache import (
    ResponseCache,
    InMemoryResponseCache,
    RedisResponseCache,
)

# Fetching
from .fetcher import DataFetcher

# Client (facade)
from .client import SpotinoteClient

# Exceptions
from .exceptions import (
    SpotifyError,
    SpotifyAuthError,
    AuthenticationError,
    SpotifyTimeoutError,
    SpotifyNetworkError,
    SpotifyAPIError,
    SpotifyRateLimitError,
    SpotifyNotFoundError,
    UnsupportedTypeError,
    ConfigError,
)


__all__ = [
    # Credentials
    'SpotifyCredentials',

    # Auth
    'CredentialManager',
    'TokenInfo',
    'TOKEN_EXPIRY_MARGIN',

    # Transport
    'SpotifyHTTPClient',

    # Cache
    'ResponseCache',
    'InMemoryResponseCache',
    'RedisResponseCache',

    # Fetching
    'DataFetcher',

    # Client (facade)
    'SpotinoteClient',

    # Exceptions
    'SpotifyError',
    'SpotifyAuthError',
    'AuthenticationError',
    'SpotifyTimeoutError',
    'SpotifyNetworkError',
    'SpotifyAPIError',
    'SpotifyRateLimitError',
    'SpotifyNotFoundError',
    'UnsupportedTypeError',
    'ConfigError',
]
