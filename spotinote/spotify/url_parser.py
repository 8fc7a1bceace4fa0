"""
Spotify URL and URI parser utility.

Extracts resource IDs from web URLs, app URIs and inline ``spotify:type:id``
links, for tracks, albums, artists and playlists.
"""

import re
import logging
from typing import Optional, Tuple

logger = logging.getLogger(__name__)

RESOURCE_TYPES = ("track", "album", "artist", "playlist")

_TYPES = "|".join(RESOURCE_TYPES)

# https://open.spotify.com/track/4iV5W9uYEdYUVa79Axb7Rh?si=abc123
# https://open.spotify.com/intl-de/album/4aawyAB9vmqN3uQ7FjRGTy
# open.spotify.com/playlist/37i9dQZF1DXcBWIGoYBM5M
_URL_PATTERN = re.compile(
    rf"spotify\.com/(?:intl-[a-zA-Z-]+/)?(?P<type>{_TYPES})/(?P<id>[a-zA-Z0-9]+)"
)

# spotify:playlist:37i9dQZF1DXcBWIGoYBM5M
_URI_PATTERN = re.compile(
    rf"^spotify:(?P<type>{_TYPES}):(?P<id>[a-zA-Z0-9]+)$"
)


def parse_spotify_url(input_string: str) -> Optional[Tuple[str, str]]:
    """
    Extract ``(type, id)`` from a Spotify URL or URI.

    Supports these formats:
        - https://open.spotify.com/track/4iV5W9uYEdYUVa79Axb7Rh
        - https://open.spotify.com/track/4iV5W9uYEdYUVa79Axb7Rh?si=abc123
        - open.spotify.com/album/4aawyAB9vmqN3uQ7FjRGTy
        - spotify:artist:0oSGxfWSnnOXhD2fKuz2Gy

    Args:
        input_string: The URL or URI to parse.

    Returns:
        ``(content_type, id)``, or None if the input does not match any
        known format.
    """
    if not input_string or not isinstance(input_string, str):
        return None

    cleaned = input_string.strip()
    if not cleaned:
        return None

    for pattern in (_URI_PATTERN, _URL_PATTERN):
        match = pattern.search(cleaned)
        if match:
            logger.debug(
                "Parsed %s ID from URL/URI: %s", match.group("type"), match.group("id")
            )
            return match.group("type"), match.group("id")

    logger.debug("Could not parse Spotify ID from: %r", cleaned)
    return None


def extract_id_from_url(
    input_string: str, content_type: Optional[str] = None
) -> Optional[str]:
    """
    Extract a resource ID, optionally requiring a specific type.

    Args:
        input_string: The URL or URI to parse.
        content_type: When given, the URL must point at this type.

    Returns:
        The resource ID, or None if nothing matched.
    """
    parsed = parse_spotify_url(input_string)
    if parsed is None:
        return None
    parsed_type, resource_id = parsed
    if content_type and parsed_type != content_type:
        logger.debug(
            "URL points at a %s, expected a %s: %r",
            parsed_type, content_type, input_string,
        )
        return None
    return resource_id
