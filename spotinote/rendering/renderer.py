"""
HTML fragment rendering for embeds.

Each content type has its own Jinja2 template under ``templates/embeds``.
Templates are autoescaped, so names and descriptions coming from Spotify
never inject markup into the note.
"""

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any, Dict, Iterable, List, Optional

from jinja2 import Environment, FileSystemLoader, select_autoescape

from spotinote.enums import ContentType, Layout, SearchType
from spotinote.schemas.settings import EmbedSettings

if TYPE_CHECKING:
    from spotinote.parser import SearchBlockConfig
    from spotinote.schemas.descriptors import RequestDescriptor, SearchDescriptor

logger = logging.getLogger(__name__)

_TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "templates" / "embeds"

ARTIST_TOP_TRACKS_SHOWN = 5
SEARCH_RESULT_GENRES_SHOWN = 3

# Where the search box submits; served by the ``main`` blueprint.
SEARCH_ACTION = "/search"

_TEMPLATE_BY_TYPE = {
    ContentType.TRACK: "track.html",
    ContentType.ALBUM: "album.html",
    ContentType.ARTIST: "artist.html",
    ContentType.PLAYLIST: "playlist.html",
}

# Playlists read best as a list when the block gives no layout.
_DEFAULT_LAYOUT_BY_TYPE = {
    ContentType.PLAYLIST: Layout.LIST.value,
}


def format_duration(ms: Optional[int]) -> str:
    """Format milliseconds as ``m:ss`` (``215000`` -> ``3:35``)."""
    if not ms:
        return "0:00"
    total_seconds = int(ms) // 1000
    minutes, seconds = divmod(total_seconds, 60)
    return f"{minutes}:{seconds:02d}"


def format_count(value: Optional[int]) -> str:
    """Format an integer with thousands separators (``1234`` -> ``1,234``)."""
    return f"{int(value or 0):,}"


def join_names(items: Optional[Iterable[Dict[str, Any]]]) -> str:
    """Join the ``name`` of each artist object with commas."""
    return ", ".join(item.get("name", "") for item in (items or []) if item)


def first_image(images: Optional[List[Dict[str, Any]]]) -> Optional[str]:
    """URL of the first (largest) image, if any."""
    if images:
        return images[0].get("url")
    return None


def release_year(release_date: Optional[str]) -> str:
    return (release_date or "")[:4]


def _build_environment() -> Environment:
    env = Environment(
        loader=FileSystemLoader(str(_TEMPLATES_DIR)),
        autoescape=select_autoescape(["html"]),
        trim_blocks=True,
        lstrip_blocks=True,
    )
    env.filters["duration"] = format_duration
    env.filters["count"] = format_count
    env.filters["names"] = join_names
    env.filters["image"] = first_image
    env.filters["year"] = release_year
    return env


class EmbedRenderer:
    """
    Renders fetched payloads into HTML fragments.

    Display toggles (album art, artist, duration...) come from the
    EmbedSettings the renderer was built with.
    """

    def __init__(self, settings: Optional[EmbedSettings] = None):
        self._settings = settings or EmbedSettings()
        self._env = _build_environment()

    @property
    def settings(self) -> EmbedSettings:
        return self._settings

    def render(self, payload: Dict[str, Any], descriptor: "RequestDescriptor") -> str:
        """
        Render one resource embed wrapped in ``spotify-container``.

        Search descriptors are delegated to render_search_results and
        unknown types render an error block.
        """
        content_type = descriptor.content_type
        if content_type == ContentType.SEARCH:
            return self.render_search_results(payload, descriptor)

        template_name = _TEMPLATE_BY_TYPE.get(content_type)
        if template_name is None:
            return self.render_error(f"Unsupported type: {content_type}")

        context = self._base_context(descriptor)
        context["item"] = payload
        try:
            if content_type == ContentType.ARTIST:
                context["top_tracks"] = (
                    payload.get("topTracks") or []
                )[:ARTIST_TOP_TRACKS_SHOWN]
            elif content_type == ContentType.PLAYLIST:
                context["entries"] = [
                    entry for entry in (payload.get("tracks") or {}).get("items") or []
                    if entry and entry.get("track")
                ]
            return self._env.get_template(template_name).render(**context)
        except Exception as e:
            # Payloads can lack fields the templates read.
            logger.warning("Rendering %s failed: %s", content_type, e)
            return self.render_error(f"Rendering error: {e}")

    def render_search_results(
        self, payload: Dict[str, Any], descriptor: "SearchDescriptor"
    ) -> str:
        """Render the result page of a search as a list of result items."""
        search_type = SearchType(descriptor.search_type)
        page = (payload or {}).get(descriptor.results_key) or {}
        items = [item for item in page.get("items") or [] if item]
        return self._env.get_template("search_results.html").render(
            items=items[: descriptor.limit],
            search_type=search_type.value,
            query=descriptor.query,
            genres_shown=SEARCH_RESULT_GENRES_SHOWN,
        )

    def render_search_form(
        self, config: "SearchBlockConfig", action: str = SEARCH_ACTION
    ) -> str:
        """Render the search box for a ```spotify-search block with no query."""
        return self._env.get_template("search_form.html").render(
            action=action,
            search_type=config.search_type,
            limit=config.limit,
            layout=config.layout,
        )

    def render_inline(self, payload: Dict[str, Any], descriptor: "RequestDescriptor") -> str:
        """Render an inline-link replacement."""
        return self._env.get_template("inline.html").render(
            body=self.render(payload, descriptor)
        )

    def render_error(self, message: str) -> str:
        return self._env.get_template("error.html").render(message=message)

    def _base_context(self, descriptor: "RequestDescriptor") -> Dict[str, Any]:
        layout = descriptor.layout
        if "layout" not in descriptor.model_fields_set:
            layout = _DEFAULT_LAYOUT_BY_TYPE.get(descriptor.content_type, layout)
        return {
            "layout": layout,
            "settings": self._settings,
            "limit": descriptor.limit,
        }
