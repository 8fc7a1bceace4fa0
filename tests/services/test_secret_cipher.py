"""
Tests for the SecretCipher (Fernet encryption/decryption).
"""

import pytest
from spotinote.services.secret_cipher import (
    SecretCipher,
    SecretEncryptionError,
)


class TestSecretCipher:
    """Tests for SecretCipher encrypt/decrypt operations."""

    def setup_method(self):
        """Build a cipher before each test."""
        self.cipher = SecretCipher("test-secret-key-for-unit-tests")

    def test_empty_key_raises(self):
        """Empty secret key should raise."""
        with pytest.raises(
            SecretEncryptionError,
            match="SECRET_KEY is required",
        ):
            SecretCipher("")

    def test_decrypt_restores_plaintext(self):
        """Decrypting returns the original secret."""
        encrypted = self.cipher.encrypt("my_client_secret")
        assert self.cipher.decrypt(encrypted) == "my_client_secret"

    def test_encrypted_differs_from_plaintext(self):
        """Encrypted output must not equal the plaintext."""
        assert self.cipher.encrypt("my_client_secret") != "my_client_secret"

    def test_encrypt_empty_raises(self):
        with pytest.raises(SecretEncryptionError, match="Cannot encrypt empty"):
            self.cipher.encrypt("")

    def test_decrypt_empty_raises(self):
        with pytest.raises(SecretEncryptionError, match="Cannot decrypt empty"):
            self.cipher.decrypt("")

    def test_decrypt_garbage_raises(self):
        with pytest.raises(SecretEncryptionError, match="Decryption failed"):
            self.cipher.decrypt("not-a-fernet-token")

    def test_different_key_cannot_decrypt(self):
        """Values encrypted under one SECRET_KEY fail under another."""
        encrypted = self.cipher.encrypt("my_client_secret")
        other = SecretCipher("a-completely-different-key")

        with pytest.raises(SecretEncryptionError):
            other.decrypt(encrypted)

    def test_same_key_derives_same_cipher(self):
        """A restarted process with the same key reads old values."""
        encrypted = self.cipher.encrypt("my_client_secret")
        restarted = SecretCipher("test-secret-key-for-unit-tests")

        assert restarted.decrypt(encrypted) == "my_client_secret"
