"""
Pydantic schema for the persisted settings blob.

Flat field names with documented defaults; unknown keys are ignored so an
older or newer settings file still loads.
"""

from typing import Optional

from pydantic import BaseModel, Field, field_validator

from spotinote.enums import Layout


class EmbedSettings(BaseModel):
    """Credentials, display preferences and the last known token."""

    client_id: str = ""
    client_secret: str = ""
    default_layout: str = Layout.CARD.value
    show_album_art: bool = True
    show_artist: bool = True
    show_album: bool = True
    show_duration: bool = True
    show_genres: bool = False
    show_popularity: bool = True
    grid_columns: int = Field(default=3, ge=1, le=8)
    max_results: int = Field(default=20, ge=1, le=50)
    access_token: Optional[str] = None
    token_expires_at: Optional[float] = None

    class Config:
        extra = "ignore"

    @field_validator("default_layout")
    @classmethod
    def validate_layout(cls, v: str) -> str:
        v = (v or "").strip().lower()
        return v or Layout.CARD.value

    @property
    def has_credentials(self) -> bool:
        return bool(self.client_id and self.client_secret)


class SettingsUpdateRequest(BaseModel):
    """Partial update of display preferences and credentials."""

    client_id: Optional[str] = None
    client_secret: Optional[str] = None
    default_layout: Optional[str] = None
    show_album_art: Optional[bool] = None
    show_artist: Optional[bool] = None
    show_album: Optional[bool] = None
    show_duration: Optional[bool] = None
    show_genres: Optional[bool] = None
    show_popularity: Optional[bool] = None
    grid_columns: Optional[int] = Field(default=None, ge=1, le=8)
    max_results: Optional[int] = Field(default=None, ge=1, le=50)

    class Config:
        extra = "ignore"

    def changes(self) -> dict:
        """Only the fields the caller actually supplied."""
        return self.model_dump(exclude_none=True)
