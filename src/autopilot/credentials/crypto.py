"""AES-256-GCM encryption for OAuth tokens at rest."""

from __future__ import annotations

import os

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from autopilot.exceptions import ConfigurationError, DecryptionError

IV_BYTES = 16
TAG_BYTES = 16


class TokenCipher:
    """Encrypts values as ``iv_hex:tag_hex:ciphertext_hex``.

    Every call to :meth:`encrypt` draws a fresh random IV, so the same token
    never encrypts to the same string twice.
    """

    def __init__(self, key: str) -> None:
        if not key:
            raise ConfigurationError("Encryption key is not configured")
        self._aead = AESGCM(key.encode("utf-8").ljust(32, b"0")[:32])

    def encrypt(self, text: str) -> str:
        iv = os.urandom(IV_BYTES)
        sealed = self._aead.encrypt(iv, text.encode("utf-8"), None)
        ciphertext, tag = sealed[:-TAG_BYTES], sealed[-TAG_BYTES:]
        return f"{iv.hex()}:{tag.hex()}:{ciphertext.hex()}"

    def decrypt(self, token: str) -> str:
        try:
            iv_hex, tag_hex, ciphertext_hex = token.split(":")
            iv = bytes.fromhex(iv_hex)
            sealed = bytes.fromhex(ciphertext_hex) + bytes.fromhex(tag_hex)
            return self._aead.decrypt(iv, sealed, None).decode("utf-8")
        except (ValueError, InvalidTag) as exc:
            raise DecryptionError("Decryption failed: invalid key or ciphertext") from exc
