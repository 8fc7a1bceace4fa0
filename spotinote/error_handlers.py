"""
Global Flask error handlers.

Provides consistent JSON error responses across all endpoints by catching
Spotify-layer exceptions and Pydantic validation errors. Embed rendering
itself never raises; these handlers cover the management endpoints.
"""

import logging
from flask import jsonify, request
from pydantic import ValidationError

from spotinote.services import SecretEncryptionError
from spotinote.spotify import (
    ConfigError,
    SpotifyAPIError,
    SpotifyAuthError,
    SpotifyError,
    SpotifyNetworkError,
    SpotifyNotFoundError,
    SpotifyRateLimitError,
    SpotifyTimeoutError,
    UnsupportedTypeError,
)

logger = logging.getLogger(__name__)


def json_error_response(message: str, status_code: int, category: str = "error"):
    """Create a standardized JSON error response."""
    return (
        jsonify({"success": False, "message": message, "category": category}),
        status_code,
    )


def register_error_handlers(app):
    """
    Register global error handlers with the Flask app.

    Args:
        app: The Flask application instance.
    """

    # =========================================================================
    # Validation Errors (400)
    # =========================================================================

    @app.errorhandler(ValidationError)
    def handle_validation_error(error: ValidationError):
        """Handle Pydantic validation errors."""
        errors_list = []
        for err in error.errors():
            field = ".".join(str(loc) for loc in err["loc"])
            errors_list.append(f"{field}: {err['msg']}")

        message = "; ".join(errors_list) if errors_list else "Validation failed"
        logger.warning("Validation error: %s", message)
        return json_error_response(message, 400)

    @app.errorhandler(ConfigError)
    def handle_config_error(error: ConfigError):
        """Handle malformed embed blocks."""
        logger.info("Embed configuration error: %s", error)
        return json_error_response(str(error), 400)

    @app.errorhandler(UnsupportedTypeError)
    def handle_unsupported_type(error: UnsupportedTypeError):
        """Handle unknown content types."""
        logger.info("Unsupported content type: %s", error.content_type)
        return json_error_response(str(error), 400)

    # =========================================================================
    # Authentication Errors (401)
    # =========================================================================

    @app.errorhandler(SpotifyAuthError)
    def handle_authentication_error(error: SpotifyAuthError):
        """Handle client-credentials failures."""
        logger.warning("Spotify authentication error: %s", error)
        return json_error_response(str(error), 401)

    # =========================================================================
    # Upstream Errors (404 / 429 / 502 / 504)
    # =========================================================================

    @app.errorhandler(SpotifyNotFoundError)
    def handle_not_found_error(error: SpotifyNotFoundError):
        """Handle resources Spotify does not know."""
        logger.info("Spotify resource not found: %s", error)
        return json_error_response("Spotify resource not found.", 404)

    @app.errorhandler(SpotifyRateLimitError)
    def handle_rate_limit_error(error: SpotifyRateLimitError):
        """Handle Spotify rate limiting."""
        logger.warning("Spotify rate limit hit, retry after %ss", error.retry_after)
        response, status = json_error_response(
            "Spotify rate limit reached. Please try again shortly.", 429, "warning"
        )
        if error.retry_after:
            response.headers["Retry-After"] = str(error.retry_after)
        return response, status

    @app.errorhandler(SpotifyTimeoutError)
    def handle_timeout_error(error: SpotifyTimeoutError):
        """Handle requests that exceeded the timeout."""
        logger.error("Spotify request timed out: %s", error)
        return json_error_response("Spotify did not respond in time.", 504)

    @app.errorhandler(SpotifyNetworkError)
    def handle_network_error(error: SpotifyNetworkError):
        """Handle transport failures."""
        logger.error("Spotify network error: %s", error)
        return json_error_response("Could not reach Spotify.", 502)

    @app.errorhandler(SpotifyAPIError)
    def handle_api_error(error: SpotifyAPIError):
        """Handle other non-2xx Web API responses."""
        logger.error("Spotify API error (%s): %s", error.status_code, error)
        return json_error_response(str(error), 502)

    @app.errorhandler(SpotifyError)
    def handle_spotify_error(error: SpotifyError):
        """Handle any other Spotify-layer failure."""
        logger.error("Spotify error: %s", error)
        return json_error_response(str(error), 500)

    # =========================================================================
    # Settings Errors (500)
    # =========================================================================

    @app.errorhandler(SecretEncryptionError)
    def handle_secret_encryption_error(error: SecretEncryptionError):
        """Handle settings encryption failures."""
        logger.error("Settings encryption error: %s", error)
        return json_error_response("Stored settings could not be decrypted.", 500)

    # =========================================================================
    # HTTP Error Codes
    # =========================================================================

    @app.errorhandler(400)
    def handle_bad_request(error):
        """Handle 400 Bad Request."""
        return json_error_response("Bad request.", 400)

    @app.errorhandler(404)
    def handle_not_found(error):
        """Handle 404 Not Found."""
        return json_error_response(f"No route for {request.path}.", 404)

    @app.errorhandler(405)
    def handle_method_not_allowed(error):
        """Handle 405 Method Not Allowed."""
        return json_error_response("Method not allowed.", 405)

    @app.errorhandler(500)
    def handle_internal_error(error):
        """Handle 500 Internal Server Error."""
        logger.error("Internal server error: %s", error, exc_info=True)
        return json_error_response("An unexpected error occurred.", 500)

    logger.info("Global error handlers registered")
