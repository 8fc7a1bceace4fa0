"""
Embed block parsing.

Turns the body of a ```spotify / ```spotify-search code block, or an inline
``spotify:type:id`` link, into a RequestDescriptor. Pure functions, no I/O.

Block format is one ``key: value`` pair per line::

    type: album
    url: https://open.spotify.com/album/4aawyAB9vmqN3uQ7FjRGTy
    layout: list
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

from pydantic import ValidationError

from spotinote.enums import ContentType, Layout, SearchType
from spotinote.schemas.descriptors import (
    MAX_SEARCH_LIMIT,
    RequestDescriptor,
    SearchDescriptor,
    build_descriptor,
)
from spotinote.schemas.settings import EmbedSettings
from spotinote.spotify.exceptions import ConfigError
from spotinote.spotify.url_parser import extract_id_from_url

logger = logging.getLogger(__name__)

RECOGNIZED_KEYS = frozenset(
    {"type", "id", "url", "layout", "limit", "searchType", "query", "fetchAllPages"}
)

DEFAULT_CONTENT_TYPE = ContentType.PLAYLIST

_TRUE_VALUES = ("true", "t", "yes", "y", "1", "all")


@dataclass(frozen=True)
class SearchBlockConfig:
    """Parsed ```spotify-search block."""

    search_type: str
    limit: int
    layout: str
    query: Optional[str] = None

    @property
    def descriptor(self) -> Optional[SearchDescriptor]:
        """Descriptor for an immediate search, when the block has a query."""
        if not self.query:
            return None
        return SearchDescriptor(
            query=self.query,
            search_type=self.search_type,
            limit=self.limit,
            layout=self.layout,
        )


def parse_block_lines(source: str) -> Dict[str, str]:
    """
    Split a block body into recognized ``key: value`` pairs.

    Only the first colon separates key from value, so URLs survive intact.
    Blank lines, lines without a value and unrecognized keys are ignored.
    """
    config: Dict[str, str] = {}
    for line in (source or "").splitlines():
        if not line.strip() or ":" not in line:
            continue
        key, value = (part.strip() for part in line.split(":", 1))
        if not key or not value:
            continue
        if key not in RECOGNIZED_KEYS:
            logger.debug("Ignoring unrecognized embed key %r", key)
            continue
        config[key] = value
    return config


def parse_code_block(
    source: str,
    settings: Optional[EmbedSettings] = None,
    fetch_all_pages: bool = False,
) -> RequestDescriptor:
    """
    Parse a ```spotify block into a descriptor.

    Args:
        source: Raw block body.
        settings: Supplies the default layout and result limit. Playlists
            without a ``layout`` key leave it unset so the renderer can
            apply the playlist default.
        fetch_all_pages: Default pagination mode for playlists.

    Returns:
        A validated descriptor.

    Raises:
        ConfigError: If the block lacks an id (or query, for searches) or
            holds invalid values.
        UnsupportedTypeError: If ``type`` names an unknown content type.
    """
    settings = settings or EmbedSettings()
    config = parse_block_lines(source)

    content_type = config.get("type", DEFAULT_CONTENT_TYPE).strip().lower()
    layout = config.get("layout") or settings.default_layout
    limit = _parse_limit(config.get("limit"), settings.max_results)

    if content_type == ContentType.SEARCH:
        query = config.get("query")
        if not query:
            raise ConfigError("No search query given")
        return _build(
            content_type=content_type,
            query=query,
            search_type=config.get("searchType", SearchType.TRACK).lower(),
            limit=min(limit, MAX_SEARCH_LIMIT),
            layout=layout,
        )

    resource_id = _resolve_id(config, content_type)
    fields: Dict[str, Any] = {
        "content_type": content_type,
        "id": resource_id,
        "limit": limit,
    }
    if config.get("layout") or content_type != ContentType.PLAYLIST:
        fields["layout"] = layout
    if content_type == ContentType.PLAYLIST:
        fields["fetch_all_pages"] = _parse_bool(
            config.get("fetchAllPages"), fetch_all_pages
        )
    return _build(**fields)


def parse_search_block(
    source: str, settings: Optional[EmbedSettings] = None
) -> SearchBlockConfig:
    """
    Parse a ```spotify-search block.

    ``searchType`` defaults to ``track``. Without a ``query`` the block
    renders as a search form.

    Raises:
        ConfigError: If ``searchType`` is not a searchable kind.
    """
    settings = settings or EmbedSettings()
    config = parse_block_lines(source)

    return SearchBlockConfig(
        search_type=_normalize_search_type(config.get("searchType")),
        limit=min(_parse_limit(config.get("limit"), settings.max_results), MAX_SEARCH_LIMIT),
        layout=(config.get("layout") or settings.default_layout).lower(),
        query=config.get("query"),
    )


def parse_search_query(
    query: Optional[str],
    search_type: Optional[str] = None,
    limit: Optional[str] = None,
    settings: Optional[EmbedSettings] = None,
) -> SearchDescriptor:
    """
    Build a search descriptor from the search box's submitted fields.

    ``search_type`` and ``limit`` arrive as raw strings and follow the
    same defaults as a ```spotify-search block.

    Raises:
        ConfigError: If the query is blank or ``search_type`` is invalid.
    """
    settings = settings or EmbedSettings()
    query = (query or "").strip()
    if not query:
        raise ConfigError("No search query given")
    return _build(
        content_type=ContentType.SEARCH.value,
        query=query,
        search_type=_normalize_search_type(search_type),
        limit=min(_parse_limit(limit, settings.max_results), MAX_SEARCH_LIMIT),
        layout=settings.default_layout,
    )


def parse_inline_link(href: str) -> RequestDescriptor:
    """
    Parse an inline ``spotify:type:id`` link.

    Raises:
        ConfigError: If the link is not of the form ``spotify:type:id``.
        UnsupportedTypeError: If ``type`` is unknown.
    """
    href = (href or "").strip()
    if not href.startswith("spotify:"):
        raise ConfigError("Invalid Spotify link format. Expected: spotify:type:id")
    parts = href[len("spotify:"):].split(":")
    if len(parts) != 2 or not all(parts):
        raise ConfigError("Invalid Spotify link format. Expected: spotify:type:id")
    content_type, resource_id = parts
    if content_type.lower() == ContentType.SEARCH:
        raise ConfigError("Search is not supported in inline links")
    return _build(
        content_type=content_type.lower(),
        id=resource_id,
        layout=Layout.INLINE.value,
    )


# =============================================================================
# Helpers
# =============================================================================


def _resolve_id(config: Dict[str, str], content_type: str) -> str:
    resource_id = config.get("id")
    if resource_id and not resource_id.isalnum():
        # Authors often paste a URL or URI into ``id``.
        resource_id = extract_id_from_url(resource_id, content_type) or resource_id
    if not resource_id and config.get("url"):
        resource_id = extract_id_from_url(config["url"], content_type)
        if not resource_id:
            raise ConfigError("Could not extract ID from Spotify URL")
    if not resource_id:
        raise ConfigError("No Spotify ID given")
    return resource_id


def _normalize_search_type(value: Optional[str]) -> str:
    search_type = (value or SearchType.TRACK.value).strip().lower()
    if search_type not in {st.value for st in SearchType}:
        raise ConfigError(
            f"Invalid searchType '{search_type}'. Valid: "
            f"{', '.join(st.value for st in SearchType)}"
        )
    return search_type


def _parse_limit(value: Optional[str], default: int) -> int:
    if value is None:
        return default
    try:
        limit = int(value)
    except (TypeError, ValueError):
        return default
    return limit if limit > 0 else default


def _parse_bool(value: Optional[str], default: bool) -> bool:
    if value is None:
        return default
    return value.strip().lower() in _TRUE_VALUES


def _build(**fields: Any) -> RequestDescriptor:
    try:
        return build_descriptor(fields)
    except ValidationError as e:
        raise ConfigError(_format_validation_error(e)) from e


def _format_validation_error(error: ValidationError) -> str:
    errors_list = []
    for err in error.errors():
        field = ".".join(str(loc) for loc in err["loc"][-1:])
        errors_list.append(f"{field}: {err['msg']}")
    return "; ".join(errors_list) if errors_list else "Invalid embed configuration"
