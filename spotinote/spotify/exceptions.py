"""
Spotify module exceptions.

Provides the exception hierarchy for authentication, transport, Web API
and embed configuration failures.
"""

from typing import Optional


class SpotifyError(Exception):
    """Base exception for all Spotify-related errors."""
    pass


class SpotifyAuthError(SpotifyError):
    """Raised when credentials are missing or the token exchange fails."""
    pass


# Name used throughout the embed layer and error handlers.
AuthenticationError = SpotifyAuthError


class SpotifyTimeoutError(SpotifyError, TimeoutError):
    """Raised when a request exceeds its timeout."""
    pass


class SpotifyNetworkError(SpotifyError):
    """Raised on transport failures (DNS, connection reset, etc.)."""
    pass


class SpotifyAPIError(SpotifyError):
    """Raised when the Spotify Web API returns a non-2xx response."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code
        self.message = message


class SpotifyNotFoundError(SpotifyAPIError):
    """Raised when a requested resource is not found."""

    def __init__(self, message: str, status_code: int = 404):
        super().__init__(message, status_code=status_code)


class SpotifyRateLimitError(SpotifyAPIError):
    """Raised when rate limited by Spotify API."""

    def __init__(self, message: str, retry_after: Optional[int] = None):
        super().__init__(message, status_code=429)
        self.retry_after = retry_after


class UnsupportedTypeError(SpotifyError):
    """Raised when a descriptor names a content type we cannot fetch."""

    def __init__(self, content_type: str):
        super().__init__(f"Unsupported content type: {content_type}")
        self.content_type = content_type


class ConfigError(SpotifyError):
    """Raised when an embed block is missing required fields."""
    pass
