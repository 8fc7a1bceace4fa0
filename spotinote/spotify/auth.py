"""
Spotify authentication and token management.

Implements the client-credentials (app-only) flow: exchanging the
application's client id/secret for an access token, tracking its expiry,
and refreshing it transparently when it is about to lapse.
"""

import logging
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Protocol

import requests
from requests.exceptions import RequestException, Timeout

from .credentials import SpotifyCredentials
from .exceptions import (
    SpotifyAuthError,
    SpotifyNetworkError,
    SpotifyTimeoutError,
)

logger = logging.getLogger(__name__)

TOKEN_URL = "https://accounts.spotify.com/api/token"

# Seconds subtracted from a token's expiry before it is considered stale.
TOKEN_EXPIRY_MARGIN = 300

DEFAULT_TIMEOUT = 10  # seconds


@dataclass(frozen=True)
class TokenInfo:
    """
    An access token and the moment it stops being usable.

    Instances are replaced wholesale on every (re)authentication and never
    updated in place.
    """

    access_token: str
    expires_at: float
    token_type: str = "Bearer"

    @classmethod
    def from_token_response(
        cls, data: Dict[str, Any], now: float
    ) -> "TokenInfo":
        """
        Build a token from the token endpoint's JSON response.

        Args:
            data: Response body with ``access_token`` and ``expires_in``.
            now: Timestamp at which the response was received.

        Raises:
            SpotifyAuthError: If the response carries no access token.
        """
        if not isinstance(data, dict) or not data.get("access_token"):
            raise SpotifyAuthError(
                "Token endpoint response did not contain an access token"
            )
        expires_in = data.get("expires_in") or 3600
        return cls(
            access_token=data["access_token"],
            expires_at=now + int(expires_in),
            token_type=data.get("token_type", "Bearer"),
        )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TokenInfo":
        """Rebuild a token from its persisted form."""
        return cls(
            access_token=data["access_token"],
            expires_at=float(data["expires_at"]),
            token_type=data.get("token_type", "Bearer"),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for storage."""
        return {
            "access_token": self.access_token,
            "expires_at": self.expires_at,
            "token_type": self.token_type,
        }

    def is_valid(self, margin: float = TOKEN_EXPIRY_MARGIN, now: Optional[float] = None) -> bool:
        """True while ``now < expires_at - margin``."""
        if not self.access_token:
            return False
        current = time.time() if now is None else now
        return current < self.expires_at - margin

    def expires_in_seconds(self, now: Optional[float] = None) -> int:
        """Seconds until expiration (negative if expired)."""
        current = time.time() if now is None else now
        return int(self.expires_at - current)


class TokenStore(Protocol):
    """Durable storage for the last known token."""

    def load_token(self) -> Optional[TokenInfo]: ...

    def save_token(self, token: TokenInfo) -> None: ...

    def clear_token(self) -> None: ...


class CredentialManager:
    """
    Owns the application credentials and the current access token.

    ``get_valid_token`` is the only entry point other components need: it
    returns the held token while it is fresh and performs exactly one
    client-credentials exchange otherwise.

    Example:
        credentials = SpotifyCredentials.from_env()
        manager = CredentialManager(credentials, token_store=settings_store)
        token = manager.get_valid_token()
    """

    def __init__(
        self,
        credentials: Optional[SpotifyCredentials],
        token_store: Optional[TokenStore] = None,
        margin: float = TOKEN_EXPIRY_MARGIN,
        timeout: float = DEFAULT_TIMEOUT,
        clock: Callable[[], float] = time.time,
    ):
        """
        Initialize the credential manager.

        Args:
            credentials: Application credentials, or None when the
                deployment has not been configured yet.
            token_store: Optional durable store; a persisted token is
                restored on construction and every new token is saved.
            margin: Safety margin in seconds subtracted from expiry.
            timeout: Bound on the token exchange, in seconds.
            clock: Time source, injectable for tests.
        """
        self._credentials = credentials
        self._token_store = token_store
        self._margin = margin
        self._timeout = timeout
        self._clock = clock
        self._token: Optional[TokenInfo] = None
        self._lock = threading.Lock()

        if token_store is not None:
            self._restore_from_store()

    @property
    def token(self) -> Optional[TokenInfo]:
        """The currently held token, if any (may be stale)."""
        return self._token

    @property
    def margin(self) -> float:
        return self._margin

    @property
    def is_authenticated(self) -> bool:
        """True when a token is held and still outside the safety margin."""
        token = self._token
        return token is not None and token.is_valid(self._margin, self._clock())

    def restore_token(self, token: Optional[TokenInfo]) -> None:
        """Adopt a previously persisted token."""
        with self._lock:
            self._token = token

    def clear(self) -> None:
        """Drop the held token."""
        with self._lock:
            self._token = None

    def get_valid_token(self) -> TokenInfo:
        """
        Return a token that is valid for at least ``margin`` seconds.

        Returns:
            The held TokenInfo, or a freshly exchanged one.

        Raises:
            SpotifyAuthError: If credentials are absent or rejected.
            SpotifyTimeoutError: If the exchange exceeds the timeout.
            SpotifyNetworkError: On transport failure.
        """
        with self._lock:
            token = self._token
            if token is not None and token.is_valid(self._margin, self._clock()):
                return token
            if token is not None:
                logger.info("Access token expired or inside safety margin, refreshing")
            return self._exchange()

    def authenticate(self) -> TokenInfo:
        """
        Force a client-credentials exchange regardless of the held token.

        Raises:
            SpotifyAuthError: If credentials are absent or rejected.
            SpotifyTimeoutError: If the exchange exceeds the timeout.
            SpotifyNetworkError: On transport failure.
        """
        with self._lock:
            return self._exchange()

    # -----------------------------------------------------------------
    # Internal
    # -----------------------------------------------------------------

    def _exchange(self) -> TokenInfo:
        """Perform the exchange. Caller must hold ``self._lock``."""
        try:
            token = self._request_token()
        except Exception:
            self._token = None
            self._forget_persisted()
            raise

        self._token = token
        logger.info(
            "Spotify authentication successful, token valid for %ss",
            token.expires_in_seconds(self._clock()),
        )
        self._persist(token)
        return token

    def _request_token(self) -> TokenInfo:
        if self._credentials is None:
            raise SpotifyAuthError(
                "Spotify client id and client secret are not configured"
            )

        try:
            response = requests.post(
                TOKEN_URL,
                data={"grant_type": "client_credentials"},
                auth=(
                    self._credentials.client_id,
                    self._credentials.client_secret,
                ),
                timeout=self._timeout,
            )
        except Timeout as e:
            logger.error("Token exchange timed out after %ss", self._timeout)
            raise SpotifyTimeoutError(
                f"Token exchange timed out after {self._timeout}s"
            ) from e
        except RequestException as e:
            logger.error("Token exchange network error: %s", e)
            raise SpotifyNetworkError(f"Token exchange failed: {e}") from e

        if response.status_code != 200:
            try:
                body = response.json()
                error_msg = body.get("error_description") or body.get("error")
            except ValueError:
                error_msg = None
            error_msg = error_msg or response.reason or response.text
            logger.warning(
                "Token exchange rejected with status %s: %s",
                response.status_code, error_msg,
            )
            raise SpotifyAuthError(
                f"Authentication failed: {response.status_code} {error_msg}"
            )

        try:
            data = response.json()
        except ValueError as e:
            raise SpotifyAuthError(
                "Token endpoint returned a malformed response"
            ) from e

        return TokenInfo.from_token_response(data, self._clock())

    def _persist(self, token: TokenInfo) -> None:
        if self._token_store is None:
            return
        try:
            self._token_store.save_token(token)
        except OSError as e:
            logger.warning("Could not persist access token: %s", e)

    def _forget_persisted(self) -> None:
        """Drop the stored token so a restart cannot revive it."""
        clear_token = getattr(self._token_store, "clear_token", None)
        if clear_token is None:
            return
        try:
            clear_token()
        except OSError as e:
            logger.warning("Could not clear persisted access token: %s", e)

    def _restore_from_store(self) -> None:
        try:
            token = self._token_store.load_token()
        except (OSError, ValueError, KeyError) as e:
            logger.warning("Could not restore persisted access token: %s", e)
            return
        if token is not None and token.is_valid(self._margin, self._clock()):
            logger.debug("Restored persisted access token")
            self._token = token
