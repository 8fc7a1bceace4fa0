"""
Request descriptors using Pydantic.

A RequestDescriptor is the normalized, immutable description of what an
embed wants to show. It is a tagged union over the five content types,
each variant carrying only the fields it needs, and it doubles as the
response cache key.
"""

import json
from typing import Annotated, Any, Dict, Literal, Mapping, Union

from pydantic import BaseModel, Field, TypeAdapter, field_validator

from spotinote.enums import ContentType, Layout, SearchType
from spotinote.spotify.exceptions import UnsupportedTypeError

SPOTIFY_ID_PATTERN = r"^[A-Za-z0-9]+$"

MAX_SEARCH_LIMIT = 50


class DescriptorBase(BaseModel):
    """Fields and behaviour shared by every descriptor variant."""

    layout: str = Field(default=Layout.CARD.value)
    limit: Annotated[int, Field(ge=1)] = 20

    class Config:
        frozen = True
        extra = "forbid"

    @field_validator("layout")
    @classmethod
    def normalize_layout(cls, v: str) -> str:
        """Layouts are case-insensitive and never empty."""
        v = (v or "").strip().lower()
        if not v:
            raise ValueError("layout cannot be empty")
        return v

    def cache_key(self) -> str:
        """
        Canonical serialization used as the cache key.

        Keys are sorted, so two descriptors with the same content always
        produce the same string regardless of how they were built.
        """
        return json.dumps(
            self.model_dump(mode="json"),
            sort_keys=True,
            separators=(",", ":"),
        )


class ResourceDescriptorBase(DescriptorBase):
    """Descriptors that address a single resource by id."""

    id: Annotated[str, Field(min_length=1, pattern=SPOTIFY_ID_PATTERN)]


class TrackDescriptor(ResourceDescriptorBase):
    content_type: Literal["track"] = "track"


class AlbumDescriptor(ResourceDescriptorBase):
    content_type: Literal["album"] = "album"


class ArtistDescriptor(ResourceDescriptorBase):
    content_type: Literal["artist"] = "artist"


class PlaylistDescriptor(ResourceDescriptorBase):
    """Playlist embed; ``fetch_all_pages`` follows ``tracks.next`` links."""

    content_type: Literal["playlist"] = "playlist"
    fetch_all_pages: bool = False


class SearchDescriptor(DescriptorBase):
    """Search embed: free-text query filtered to one result kind."""

    content_type: Literal["search"] = "search"
    query: Annotated[str, Field(min_length=1)]
    search_type: SearchType = SearchType.TRACK
    limit: Annotated[int, Field(ge=1, le=MAX_SEARCH_LIMIT)] = 20

    @field_validator("query")
    @classmethod
    def strip_query(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("query cannot be empty")
        return v

    @property
    def results_key(self) -> str:
        """Key of the result page in the search response (``tracks``...)."""
        return f"{self.search_type.value}s"


RequestDescriptor = Annotated[
    Union[
        TrackDescriptor,
        AlbumDescriptor,
        ArtistDescriptor,
        PlaylistDescriptor,
        SearchDescriptor,
    ],
    Field(discriminator="content_type"),
]

_descriptor_adapter = TypeAdapter(RequestDescriptor)

_SUPPORTED_TYPES = {ct.value for ct in ContentType}


def build_descriptor(data: Mapping[str, Any]) -> RequestDescriptor:
    """
    Build the right descriptor variant from a plain mapping.

    Args:
        data: Mapping with a ``content_type`` key plus variant fields.

    Returns:
        A validated, frozen descriptor.

    Raises:
        UnsupportedTypeError: If ``content_type`` is not a known kind.
        pydantic.ValidationError: If fields are missing or invalid.
    """
    content_type = str(data.get("content_type", "")).strip().lower()
    if content_type not in _SUPPORTED_TYPES:
        raise UnsupportedTypeError(content_type or "<missing>")
    payload: Dict[str, Any] = dict(data)
    payload["content_type"] = content_type
    return _descriptor_adapter.validate_python(payload)
