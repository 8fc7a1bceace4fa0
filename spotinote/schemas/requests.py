"""
Request validation schemas using Pydantic.

Provides type-safe validation for the JSON bodies accepted by the
embed endpoints.
"""

from typing import Literal

from pydantic import BaseModel, Field, field_validator

from spotinote.enums import BlockKind


class EmbedRequest(BaseModel):
    """Body of ``POST /embed``: one code block to render."""

    source: str = Field(default="", max_length=10_000)
    kind: Literal["spotify", "spotify-search"] = BlockKind.SPOTIFY.value

    class Config:
        extra = "ignore"

    @field_validator("kind", mode="before")
    @classmethod
    def normalize_kind(cls, v):
        """Accept the fence language in any case."""
        if isinstance(v, str):
            return v.strip().lower()
        return v


class RenderMarkdownRequest(BaseModel):
    """Body of ``POST /render``: a whole note."""

    markdown: str = Field(default="", max_length=500_000)

    class Config:
        extra = "ignore"
