"""
Lightweight HTTP client for the Spotify Web API.

Wraps requests.Session with per-call token acquisition, error mapping and
pagination support. It makes no implicit retries: one failure is reported
to the caller as one exception.
"""

import logging
from typing import Any, Dict, List, Optional

import requests
from requests.exceptions import RequestException, Timeout

from .auth import DEFAULT_TIMEOUT, CredentialManager
from .exceptions import (
    SpotifyAPIError,
    SpotifyNetworkError,
    SpotifyNotFoundError,
    SpotifyRateLimitError,
    SpotifyTimeoutError,
)

logger = logging.getLogger(__name__)

BASE_URL = "https://api.spotify.com/v1"

_BODY_METHODS = ("POST", "PUT")


def _error_message(response: requests.Response) -> str:
    """Pull ``error.message`` from a Spotify error body, else the reason."""
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, dict) and error.get("message"):
            return error["message"]
        if isinstance(error, str) and error:
            return body.get("error_description") or error
    return response.reason or f"HTTP {response.status_code}"


class SpotifyHTTPClient:
    """
    HTTP client for Spotify Web API requests.

    A token is obtained from the CredentialManager before every call, so a
    stale token is refreshed transparently.
    """

    def __init__(
        self,
        credential_manager: CredentialManager,
        timeout: float = DEFAULT_TIMEOUT,
        session: Optional[requests.Session] = None,
    ):
        """
        Initialize the HTTP client.

        Args:
            credential_manager: Source of valid access tokens.
            timeout: Per-request timeout in seconds.
            session: Optional pre-built session (used by tests).
        """
        self._credentials = credential_manager
        self._timeout = timeout
        self._session = session or requests.Session()
        self._session.headers.update({"Content-Type": "application/json"})

    def close(self) -> None:
        """Close the underlying HTTP session."""
        self._session.close()

    # -----------------------------------------------------------------
    # Public HTTP methods
    # -----------------------------------------------------------------

    def get(self, path: str, params: Optional[Dict] = None) -> Any:
        """Send a GET request."""
        return self.request(path, "GET", params=params)

    def post(self, path: str, json: Any = None) -> Any:
        """Send a POST request."""
        return self.request(path, "POST", body=json)

    def put(self, path: str, json: Any = None) -> Any:
        """Send a PUT request."""
        return self.request(path, "PUT", body=json)

    def delete(self, path: str) -> Any:
        """Send a DELETE request."""
        return self.request(path, "DELETE")

    def get_all_pages(
        self,
        path: str,
        params: Optional[Dict] = None,
        items_key: str = "items",
    ) -> List[Dict]:
        """
        Fetch all pages of a paginated endpoint.

        Follows the ``next`` URL in each response until exhausted.

        Args:
            path: Initial API path or absolute ``next`` URL.
            params: Optional query parameters for the first request.
            items_key: Key containing the list items (default ``items``).

        Returns:
            Concatenated list of all items across pages.
        """
        all_items: List[Dict] = []
        url: Optional[str] = path
        page_params = params

        while url:
            data = self.request(url, "GET", params=page_params)
            # ``next`` URLs embed their own query string.
            page_params = None
            if not data:
                break
            all_items.extend(data.get(items_key) or [])
            url = data.get("next")

        return all_items

    def request(
        self,
        endpoint_path: str,
        method: str = "GET",
        body: Any = None,
        params: Optional[Dict] = None,
    ) -> Any:
        """
        Execute an authenticated request against the Web API.

        Args:
            endpoint_path: Path relative to BASE_URL (``/tracks/{id}``) or
                an absolute URL returned by Spotify (pagination links).
            method: HTTP method.
            body: JSON-serializable body, sent only for POST and PUT.
            params: Optional query parameters.

        Returns:
            Decoded JSON, or None for a 204 response.

        Raises:
            SpotifyNotFoundError: On 404.
            SpotifyRateLimitError: On 429.
            SpotifyAPIError: On any other non-2xx status.
            SpotifyTimeoutError: If the request exceeds the timeout.
            SpotifyNetworkError: On transport failure.
            SpotifyAuthError: If no valid token can be obtained.
        """
        token = self._credentials.get_valid_token()
        method = method.upper()
        url = self._build_url(endpoint_path)
        json_body = body if method in _BODY_METHODS else None

        try:
            response = self._session.request(
                method,
                url,
                params=params,
                json=json_body,
                headers={"Authorization": f"Bearer {token.access_token}"},
                timeout=self._timeout,
            )
        except Timeout as e:
            logger.warning("%s %s timed out after %ss", method, url, self._timeout)
            raise SpotifyTimeoutError(
                f"Request to {endpoint_path} timed out after {self._timeout}s"
            ) from e
        except RequestException as e:
            logger.warning("%s %s network error: %s", method, url, e)
            raise SpotifyNetworkError(f"Network error: {e}") from e

        # --- Success ---
        if response.status_code == 204:
            return None
        if 200 <= response.status_code < 300:
            try:
                return response.json()
            except ValueError as e:
                raise SpotifyAPIError(
                    f"Malformed JSON in response from {endpoint_path}",
                    status_code=response.status_code,
                ) from e

        message = _error_message(response)
        logger.warning(
            "Spotify API error %s on %s %s: %s",
            response.status_code, method, url, message,
        )

        # --- 404 Not Found ---
        if response.status_code == 404:
            raise SpotifyNotFoundError(
                f"Spotify API Error: 404 - {message}"
            )

        # --- 429 Rate Limited ---
        if response.status_code == 429:
            retry_after = response.headers.get("Retry-After")
            raise SpotifyRateLimitError(
                f"Spotify API Error: 429 - {message}",
                retry_after=int(retry_after) if retry_after and retry_after.isdigit() else None,
            )

        raise SpotifyAPIError(
            f"Spotify API Error: {response.status_code} - {message}",
            status_code=response.status_code,
        )

    @staticmethod
    def _build_url(endpoint_path: str) -> str:
        if endpoint_path.startswith(("http://", "https://")):
            return endpoint_path
        if not endpoint_path.startswith("/"):
            endpoint_path = f"/{endpoint_path}"
        return f"{BASE_URL}{endpoint_path}"
