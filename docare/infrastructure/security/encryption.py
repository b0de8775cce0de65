"""
AES-256-GCM field encryption for PHI stored at rest.

Values are serialised as ``iv_hex:auth_tag_hex:ciphertext_hex`` so a single
text column holds everything needed to decrypt them.
"""

import hashlib
import hmac
import logging
import os
import secrets
from functools import lru_cache
from typing import Optional

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from ...core.config import settings

logger = logging.getLogger(__name__)

KEY_SIZE = 32
IV_LENGTH = 16
TAG_LENGTH = 16


class EncryptionError(Exception):
    pass


class FieldCipher:
    def __init__(self, key: bytes) -> None:
        if len(key) != KEY_SIZE:
            raise ValueError(f"Encryption key must be {KEY_SIZE} bytes, got {len(key)}")
        self._aesgcm = AESGCM(key)

    @classmethod
    def from_hex(cls, key_hex: str) -> "FieldCipher":
        try:
            key = bytes.fromhex(key_hex)
        except ValueError as e:
            raise ValueError("Encryption key must be hex encoded") from e
        return cls(key)

    def encrypt(self, text: Optional[str]) -> Optional[str]:
        if not text:
            return None
        iv = os.urandom(IV_LENGTH)
        sealed = self._aesgcm.encrypt(iv, text.encode("utf-8"), None)
        ciphertext, tag = sealed[:-TAG_LENGTH], sealed[-TAG_LENGTH:]
        return f"{iv.hex()}:{tag.hex()}:{ciphertext.hex()}"

    def decrypt(self, value: Optional[str]) -> Optional[str]:
        if not value:
            return None
        parts = value.split(":")
        if len(parts) != 3:
            raise EncryptionError("Invalid encrypted data format")
        try:
            iv, tag, ciphertext = (bytes.fromhex(p) for p in parts)
            plain = self._aesgcm.decrypt(iv, ciphertext + tag, None)
        except (ValueError, InvalidTag) as e:
            raise EncryptionError("Failed to decrypt data") from e
        return plain.decode("utf-8")


@lru_cache()
def get_cipher() -> FieldCipher:
    if settings.ENCRYPTION_KEY:
        return FieldCipher.from_hex(settings.ENCRYPTION_KEY)
    logger.warning("ENCRYPTION_KEY not set; using an ephemeral key, encrypted data will not survive a restart")
    return FieldCipher(secrets.token_bytes(KEY_SIZE))


def encrypt(text: Optional[str]) -> Optional[str]:
    return get_cipher().encrypt(text)


def decrypt(value: Optional[str]) -> Optional[str]:
    return get_cipher().decrypt(value)


def hash_value(data: str) -> str:
    """One-way SHA-256 hex digest, used for refresh token lookups."""
    return hashlib.sha256(data.encode("utf-8")).hexdigest()


def generate_token(length: int = 32) -> str:
    """Random hex string built from ``length`` bytes."""
    return secrets.token_hex(length)


def secure_compare(a: object, b: object) -> bool:
    if not isinstance(a, str) or not isinstance(b, str):
        return False
    return hmac.compare_digest(a.encode("utf-8"), b.encode("utf-8"))
