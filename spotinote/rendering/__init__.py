"""HTML rendering for Spotify embeds."""

from .renderer import (
    EmbedRenderer,
    format_count,
    format_duration,
)

__all__ = [
    "EmbedRenderer",
    "format_count",
    "format_duration",
]
