"""
Enums for content types, search types and layouts.

Single source of truth for string constants used across schemas,
the parser, the fetcher and the renderer.
"""

from enum import StrEnum


class ContentType(StrEnum):
    """Kinds of Spotify content an embed can show."""
    TRACK = "track"
    ALBUM = "album"
    ARTIST = "artist"
    PLAYLIST = "playlist"
    SEARCH = "search"


class SearchType(StrEnum):
    """Result kinds the search endpoint can be filtered to."""
    TRACK = "track"
    ALBUM = "album"
    ARTIST = "artist"
    PLAYLIST = "playlist"


class Layout(StrEnum):
    """Built-in embed layouts."""
    CARD = "card"
    LIST = "list"
    GRID = "grid"
    COMPACT = "compact"
    INLINE = "inline"


class BlockKind(StrEnum):
    """Fenced code block languages we render."""
    SPOTIFY = "spotify"
    SPOTIFY_SEARCH = "spotify-search"
