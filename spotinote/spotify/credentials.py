"""
Spotify credentials management.

Provides a clean dataclass for client-credentials (app-only) authentication,
so the auth layer never reaches into Flask config or settings directly.
"""

import os
from dataclasses import dataclass
from typing import TYPE_CHECKING

from .exceptions import SpotifyAuthError

if TYPE_CHECKING:
    from spotinote.schemas.settings import EmbedSettings


@dataclass(frozen=True)
class SpotifyCredentials:
    """
    Application id and secret used for the client-credentials exchange.

    Both values are required and the id may not contain ``:``, since the
    pair is sent as HTTP Basic auth. The secret is masked in ``repr``.

    Example:
        credentials = SpotifyCredentials.from_settings(store.load())
    """

    client_id: str
    client_secret: str

    def __post_init__(self):
        """Validate credentials on creation."""
        if not self.client_id or not self.client_id.strip():
            raise SpotifyAuthError("client_id is required")
        if not self.client_secret or not self.client_secret.strip():
            raise SpotifyAuthError("client_secret is required")
        if ":" in self.client_id:
            raise SpotifyAuthError("client_id must not contain ':'")

    def __repr__(self) -> str:
        return f"SpotifyCredentials(client_id={self.client_id!r}, client_secret='***')"

    @classmethod
    def from_flask_config(cls, config: dict) -> "SpotifyCredentials":
        """
        Create credentials from Flask app config.

        Args:
            config: Flask application config dictionary.

        Returns:
            SpotifyCredentials instance.

        Raises:
            SpotifyAuthError: If required config keys are missing.
        """
        return cls(
            client_id=config.get("SPOTIFY_CLIENT_ID") or "",
            client_secret=config.get("SPOTIFY_CLIENT_SECRET") or "",
        )

    @classmethod
    def from_env(cls) -> "SpotifyCredentials":
        """
        Create credentials from environment variables.

        Raises:
            SpotifyAuthError: If required environment variables are missing.
        """
        return cls(
            client_id=os.getenv("SPOTIFY_CLIENT_ID", ""),
            client_secret=os.getenv("SPOTIFY_CLIENT_SECRET", ""),
        )

    @classmethod
    def from_settings(cls, settings: "EmbedSettings") -> "SpotifyCredentials":
        """Create credentials from the persisted settings blob."""
        return cls(
            client_id=settings.client_id,
            client_secret=settings.client_secret,
        )
