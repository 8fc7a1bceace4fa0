"""
Spotinote Services Package

Service layer between the HTTP surface and the Spotify client.

Usage:
    from spotinote.services import EmbedService, SettingsStore, SecretCipher

Example:
    store = SettingsStore("data/settings.json", cipher=SecretCipher(secret_key))
    client = SpotinoteClient.from_config(app.config, settings_store=store)
    service = EmbedService(client, settings_provider=store.load)

    html = service.render_markdown_blocks(note_text)
"""

# Secret encryption
from spotinote.services.secret_cipher import (
    SecretCipher,
    SecretEncryptionError,
)

# Settings persistence
from spotinote.services.settings_store import SettingsStore

# Embed rendering
from spotinote.services.embed_service import EmbedService

__all__ = [
    "SecretCipher",
    "SecretEncryptionError",
    "SettingsStore",
    "EmbedService",
]
