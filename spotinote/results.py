"""Explicit success/error result returned at the embed boundary."""

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Optional

if TYPE_CHECKING:
    from spotinote.spotify.exceptions import SpotifyError


@dataclass(frozen=True)
class FetchResult:
    """Outcome of fetching (or parsing) one embed."""

    success: bool
    value: Any = None
    error: Optional["SpotifyError"] = None

    @classmethod
    def ok(cls, value: Any) -> "FetchResult":
        return cls(success=True, value=value)

    @classmethod
    def failure(cls, error: "SpotifyError") -> "FetchResult":
        return cls(success=False, error=error)

    @property
    def error_message(self) -> Optional[str]:
        return str(self.error) if self.error is not None else None
