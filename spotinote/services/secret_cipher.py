"""
Secret encryption for the persisted settings blob.

Uses Fernet symmetric encryption with a key derived from the app's
SECRET_KEY via PBKDF2, so the client secret and the last access token
are never written to disk in plaintext.
"""

import base64
import logging

from cryptography.fernet import Fernet, InvalidToken
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

logger = logging.getLogger(__name__)

# Fixed salt for key derivation. Changing this invalidates all stored secrets.
_SALT = b"spotinote-settings-encryption-v1"

_ITERATIONS = 480_000


class SecretEncryptionError(Exception):
    """Raised when secret encryption or decryption fails."""

    pass


class SecretCipher:
    """
    Encrypts and decrypts short secrets for storage.

    Example:
        cipher = SecretCipher(app.config["SECRET_KEY"])
        stored = cipher.encrypt("client-secret")
        cipher.decrypt(stored)  # "client-secret"
    """

    def __init__(self, secret_key: str):
        """
        Derive the Fernet key from the application's SECRET_KEY.

        Raises:
            SecretEncryptionError: If the key is empty or derivation fails.
        """
        if not secret_key:
            raise SecretEncryptionError(
                "SECRET_KEY is required for settings encryption"
            )

        try:
            kdf = PBKDF2HMAC(
                algorithm=hashes.SHA256(),
                length=32,
                salt=_SALT,
                iterations=_ITERATIONS,
            )
            key = base64.urlsafe_b64encode(
                kdf.derive(secret_key.encode("utf-8"))
            )
            self._fernet = Fernet(key)
        except Exception as e:
            logger.error("Failed to initialize SecretCipher: %s", e)
            raise SecretEncryptionError(
                f"Failed to derive encryption key: {e}"
            )

    def encrypt(self, plaintext: str) -> str:
        """
        Encrypt a secret for storage.

        Raises:
            SecretEncryptionError: If the value is empty.
        """
        if not plaintext:
            raise SecretEncryptionError("Cannot encrypt empty value")
        return self._fernet.encrypt(plaintext.encode("utf-8")).decode("utf-8")

    def decrypt(self, ciphertext: str) -> str:
        """
        Decrypt a stored secret.

        Raises:
            SecretEncryptionError: If the value is corrupted or was
                encrypted under a different SECRET_KEY.
        """
        if not ciphertext:
            raise SecretEncryptionError("Cannot decrypt empty value")

        try:
            return self._fernet.decrypt(ciphertext.encode("utf-8")).decode("utf-8")
        except InvalidToken:
            logger.error("Secret decryption failed: invalid token or wrong key")
            raise SecretEncryptionError(
                "Decryption failed: value is corrupted or SECRET_KEY changed"
            )
