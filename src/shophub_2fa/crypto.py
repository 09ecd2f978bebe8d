"""AES-256-GCM sealing of TOTP secrets before they reach the user store."""

from __future__ import annotations

import base64
import os

from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from shophub_2fa.config import Settings, settings

_NONCE_SIZE = 12  # 96-bit nonce for AES-GCM
_KEY_SIZE = 32


def _decode_key(raw: str) -> bytes:
    if not raw:
        raise RuntimeError("SHOPHUB_2FA_MASTER_KEY not set")
    key = base64.b64decode(raw)
    if len(key) != _KEY_SIZE:
        raise ValueError("SHOPHUB_2FA_MASTER_KEY must be 32 bytes (base64-encoded)")
    return key


class SecretSealer:
    """Encrypts Base32 secrets as base64(nonce + ciphertext)."""

    def __init__(self, key: str) -> None:
        self._aead = AESGCM(_decode_key(key))

    @classmethod
    def from_settings(cls, cfg: Settings | None = None) -> SecretSealer:
        """Build a sealer from ``master_key`` (defaults to the global settings)."""
        return cls((cfg or settings).master_key)

    def seal(self, plaintext: str) -> str:
        nonce = os.urandom(_NONCE_SIZE)
        ct = self._aead.encrypt(nonce, plaintext.encode(), None)
        return base64.b64encode(nonce + ct).decode()

    def unseal(self, token: str) -> str:
        raw = base64.b64decode(token)
        nonce, ct = raw[:_NONCE_SIZE], raw[_NONCE_SIZE:]
        return self._aead.decrypt(nonce, ct, None).decode()

