"""
Pydantic schemas for descriptors, settings and HTTP request bodies.
"""

from .descriptors import (
    RequestDescriptor,
    TrackDescriptor,
    AlbumDescriptor,
    ArtistDescriptor,
    PlaylistDescriptor,
    SearchDescriptor,
    build_descriptor,
)
from .settings import EmbedSettings, SettingsUpdateRequest
from .requests import EmbedRequest, RenderMarkdownRequest

__all__ = [
    "RequestDescriptor",
    "TrackDescriptor",
    "AlbumDescriptor",
    "ArtistDescriptor",
    "PlaylistDescriptor",
    "SearchDescriptor",
    "build_descriptor",
    "EmbedSettings",
    "SettingsUpdateRequest",
    "EmbedRequest",
    "RenderMarkdownRequest",
]
