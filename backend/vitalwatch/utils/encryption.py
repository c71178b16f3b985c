"""
Field-level encryption for patient data and device credentials.
Uses AES-256-GCM for encryption at rest.
"""
import os
import base64
import hashlib
import hmac
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

NONCE_SIZE = 12  # 96-bit nonce for GCM


class FieldEncryptor:
    """Encrypts and decrypts individual column values."""

    def __init__(self, key_b64: str = None):
        key_b64 = key_b64 or os.getenv('PHI_ENCRYPTION_KEY')
        if not key_b64:
            raise ValueError("PHI_ENCRYPTION_KEY environment variable not set")
        self._key = base64.b64decode(key_b64)
        if len(self._key) != 32:
            raise ValueError("PHI_ENCRYPTION_KEY must be 32 bytes (256 bits)")
        self._aesgcm = AESGCM(self._key)

    def encrypt(self, plaintext: str) -> str:
        """Return base64(nonce + ciphertext) for a plaintext string."""
        if not plaintext:
            return plaintext

        nonce = os.urandom(NONCE_SIZE)
        ciphertext = self._aesgcm.encrypt(nonce, plaintext.encode('utf-8'), None)
        return base64.b64encode(nonce + ciphertext).decode('utf-8')

    def decrypt(self, encrypted_b64: str) -> str:
        if not encrypted_b64:
            return encrypted_b64

        encrypted_data = base64.b64decode(encrypted_b64)
        nonce = encrypted_data[:NONCE_SIZE]
        ciphertext = encrypted_data[NONCE_SIZE:]
        return self._aesgcm.decrypt(nonce, ciphertext, None).decode('utf-8')

    def lookup_hash(self, value: str) -> str:
        """Deterministic HMAC-SHA256 of a normalised value, keyed with the
        encryption key so equality lookups work without decrypting."""
        normalised = value.strip().lower().encode('utf-8')
        return hmac.new(self._key, normalised, hashlib.sha256).hexdigest()


_encryptor = None


def get_encryptor() -> FieldEncryptor:
    """Get or create the shared encryptor."""
    global _encryptor
    if _encryptor is None:
        _encryptor = FieldEncryptor()
    return _encryptor


def encrypt_phi(value: str) -> str:
    return get_encryptor().encrypt(value)


def decrypt_phi(value: str) -> str:
    return get_encryptor().decrypt(value)


def hash_email(email: str) -> str:
    return get_encryptor().lookup_hash(email)


def mask_secret(value: str, visible: int = 4) -> str:
    """Mask all but the last few characters of an API key for display."""
    if not value:
        return value
    if len(value) <= visible:
        return '*' * len(value)
    return '*' * (len(value) - visible) + value[-visible:]
