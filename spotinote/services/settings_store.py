"""
Persisted settings blob.

Holds the Spotify credentials, display preferences and the last known
access token in one flat JSON document, so authentication survives
restarts without re-prompting.
"""

import json
import logging
import os
import tempfile
import threading
from typing import Any, Dict, Optional

from pydantic import ValidationError

from spotinote.schemas.settings import EmbedSettings
from spotinote.spotify.auth import TokenInfo
from .secret_cipher import SecretCipher, SecretEncryptionError

logger = logging.getLogger(__name__)

# Fields written through the cipher when one is configured.
_SECRET_FIELDS = ("client_secret", "access_token")

_ENCRYPTED_PREFIX = "fernet:"


class SettingsStore:
    """
    Loads and saves EmbedSettings as a JSON file.

    Missing files yield the defaults, unknown keys are ignored, and writes
    go through a temporary file so a crash never leaves a half-written blob.

    Example:
        store = SettingsStore("data/settings.json", cipher=SecretCipher(key))
        settings = store.load()
        store.update(default_layout="list")
    """

    def __init__(self, path: str, cipher: Optional[SecretCipher] = None):
        self._path = path
        self._cipher = cipher
        self._lock = threading.RLock()

    @property
    def path(self) -> str:
        return self._path

    def load(self) -> EmbedSettings:
        """
        Read the settings file, merging stored values over the defaults.

        An unreadable or invalid file is logged and treated as empty.
        """
        with self._lock:
            raw = self._read_raw()
        data = self._decrypt_fields(raw)
        try:
            return EmbedSettings(**data)
        except ValidationError as e:
            logger.warning(
                "Invalid settings in %s, falling back to defaults: %s",
                self._path, e,
            )
            return EmbedSettings()

    def save(self, settings: EmbedSettings) -> None:
        """
        Write the full settings document.

        Raises:
            OSError: If the file cannot be written.
        """
        data = self._encrypt_fields(settings.model_dump())
        with self._lock:
            self._write_raw(data)
        logger.debug("Saved settings to %s", self._path)

    def update(self, **fields: Any) -> EmbedSettings:
        """Load, apply field changes, validate and save."""
        with self._lock:
            current = self.load()
            updated = EmbedSettings(**{**current.model_dump(), **fields})
            self.save(updated)
        return updated

    # -----------------------------------------------------------------
    # Token persistence
    # -----------------------------------------------------------------

    def load_token(self) -> Optional[TokenInfo]:
        """Return the persisted token, if one was saved."""
        settings = self.load()
        if not settings.access_token or settings.token_expires_at is None:
            return None
        return TokenInfo(
            access_token=settings.access_token,
            expires_at=float(settings.token_expires_at),
        )

    def save_token(self, token: TokenInfo) -> None:
        self.update(
            access_token=token.access_token,
            token_expires_at=token.expires_at,
        )

    def clear_token(self) -> None:
        self.update(access_token=None, token_expires_at=None)

    # -----------------------------------------------------------------
    # Internal
    # -----------------------------------------------------------------

    def _read_raw(self) -> Dict[str, Any]:
        if not os.path.exists(self._path):
            return {}
        try:
            with open(self._path, "r", encoding="utf-8") as fh:
                data = json.load(fh)
        except (OSError, ValueError) as e:
            logger.warning("Could not read settings from %s: %s", self._path, e)
            return {}
        if not isinstance(data, dict):
            logger.warning("Settings file %s is not a JSON object", self._path)
            return {}
        return data

    def _write_raw(self, data: Dict[str, Any]) -> None:
        directory = os.path.dirname(os.path.abspath(self._path))
        os.makedirs(directory, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=directory, prefix=".settings-", suffix=".json")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(data, fh, indent=2, sort_keys=True)
            os.replace(tmp_path, self._path)
        except OSError:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise

    def _encrypt_fields(self, data: Dict[str, Any]) -> Dict[str, Any]:
        if self._cipher is None:
            return data
        result = dict(data)
        for name in _SECRET_FIELDS:
            value = result.get(name)
            if value:
                result[name] = _ENCRYPTED_PREFIX + self._cipher.encrypt(value)
        return result

    def _decrypt_fields(self, data: Dict[str, Any]) -> Dict[str, Any]:
        result = dict(data)
        for name in _SECRET_FIELDS:
            value = result.get(name)
            if not isinstance(value, str) or not value.startswith(_ENCRYPTED_PREFIX):
                continue
            if self._cipher is None:
                logger.warning("Settings field %s is encrypted but no cipher is configured", name)
                result[name] = None if name == "access_token" else ""
                continue
            try:
                result[name] = self._cipher.decrypt(value[len(_ENCRYPTED_PREFIX):])
            except SecretEncryptionError as e:
                logger.warning("Could not decrypt settings field %s: %s", name, e)
                result[name] = None if name == "access_token" else ""
        return result
