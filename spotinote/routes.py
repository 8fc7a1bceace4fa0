"""
Flask routes for Spotinote.

This module handles HTTP requests and responses only. Parsing, fetching
and rendering are delegated to the EmbedService; Spotify-layer exceptions
raised by the management endpoints are turned into JSON by the global
error handlers.
"""

import logging
from datetime import datetime, timezone

from flask import Blueprint, current_app, jsonify, request
from pydantic import ValidationError

from spotinote.enums import BlockKind
from spotinote.schemas import EmbedRequest, RenderMarkdownRequest, SettingsUpdateRequest
from spotinote.services import EmbedService, SettingsStore
from spotinote.spotify import SpotinoteClient

logger = logging.getLogger(__name__)
main = Blueprint("main", __name__)

_HTML_HEADERS = {"Content-Type": "text/html; charset=utf-8"}

_CREDENTIAL_FIELDS = ("client_id", "client_secret")


# =============================================================================
# Helper Functions
# =============================================================================


def get_client() -> SpotinoteClient:
    return current_app.extensions["spotinote"]["client"]


def get_embed_service() -> EmbedService:
    return current_app.extensions["spotinote"]["embed_service"]


def get_settings_store() -> SettingsStore:
    return current_app.extensions["spotinote"]["settings_store"]


def json_error(message: str, status_code: int = 400) -> tuple:
    """Return a JSON error response."""
    return (
        jsonify({
            "success": False,
            "message": message,
            "category": "error",
        }),
        status_code,
    )


def json_success(message: str, **extra):
    """Return a JSON success response."""
    return jsonify({
        "success": True,
        "message": message,
        "category": "success",
        **extra,
    })


def validate_json(schema_class):
    """
    Parse and validate the JSON request body against a Pydantic schema.

    Returns:
        (parsed_model, None) on success.
        (None, error_response_tuple) on failure.
    """
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return None, json_error("Request body must be a JSON object.", 400)

    try:
        return schema_class(**data), None
    except ValidationError as e:
        first_error = e.errors()[0] if e.errors() else {}
        msg = first_error.get("msg", "Invalid input")
        return None, json_error(f"Validation error: {msg}", 400)


# =============================================================================
# Embed Rendering
# =============================================================================


@main.route("/embed", methods=["POST"])
def embed():
    """Render one ```spotify or ```spotify-search block body to HTML."""
    parsed, err = validate_json(EmbedRequest)
    if err:
        return err

    service = get_embed_service()
    if parsed.kind == BlockKind.SPOTIFY_SEARCH:
        html = service.process_search_block(parsed.source)
    else:
        html = service.process_code_block(parsed.source)
    return html, 200, _HTML_HEADERS


@main.route("/render", methods=["POST"])
def render_markdown():
    """Replace every Spotify block and inline link in a note."""
    parsed, err = validate_json(RenderMarkdownRequest)
    if err:
        return err

    html = get_embed_service().render_document(parsed.markdown)
    return html, 200, _HTML_HEADERS


@main.route("/search")
def search():
    """Run a search submitted from a rendered ```spotify-search box."""
    html = get_embed_service().process_search_query(
        request.args.get("query"),
        search_type=request.args.get("searchType"),
        limit=request.args.get("limit"),
    )
    return html, 200, _HTML_HEADERS


# =============================================================================
# Authentication
# =============================================================================


@main.route("/auth/status")
def auth_status():
    """Report whether a usable app token is held."""
    manager = get_client().credential_manager
    token = manager.token
    return jsonify({
        "authenticated": manager.is_authenticated,
        "expires_in": token.expires_in_seconds() if token else None,
    })


@main.route("/auth/refresh", methods=["POST"])
def auth_refresh():
    """Force a new client-credentials exchange."""
    token = get_client().authenticate()
    logger.info("Spotify token refreshed on request")
    return json_success(
        "Spotify authentication successful.",
        expires_in=token.expires_in_seconds(),
    )


# =============================================================================
# Cache
# =============================================================================


@main.route("/cache/clear", methods=["POST"])
def cache_clear():
    """Drop every cached Spotify response."""
    get_client().clear_cache()
    logger.info("Response cache cleared on request")
    return json_success("Cache cleared.")


# =============================================================================
# Settings
# =============================================================================


@main.route("/settings")
def get_settings():
    """Return the persisted settings with secrets masked."""
    settings = get_settings_store().load()
    data = settings.model_dump(exclude={"client_secret", "access_token"})
    data["has_client_secret"] = bool(settings.client_secret)
    return jsonify(data)


@main.route("/settings", methods=["POST"])
def update_settings():
    """Apply a partial settings update."""
    parsed, err = validate_json(SettingsUpdateRequest)
    if err:
        return err

    changes = parsed.changes()
    if not changes:
        return json_error("No settings to update.", 400)

    store = get_settings_store()
    store.update(**changes)

    if any(field in changes for field in _CREDENTIAL_FIELDS):
        from spotinote import install_client

        # New credentials invalidate the held token and any cached payloads.
        store.clear_token()
        install_client(current_app._get_current_object())
        logger.info("Spotify credentials updated, client rebuilt")

    return json_success("Settings updated.", updated=sorted(changes))


# =============================================================================
# Health
# =============================================================================


@main.route("/health")
def health():
    """Health check endpoint for Docker and monitoring."""
    cache = get_client().cache
    cache_healthy = getattr(cache, "is_connected", lambda: True)()
    overall_status = "ok" if cache_healthy else "degraded"

    return (
        jsonify({
            "status": overall_status,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }),
        200,
    )
