"""Tests for AES-256-GCM sealing of TOTP secrets."""

from __future__ import annotations

import base64
import os

import pytest
from cryptography.exceptions import InvalidTag

from shophub_2fa.config import Settings
from shophub_2fa.crypto import SecretSealer


def _key(n: int = 32) -> str:
    return base64.b64encode(os.urandom(n)).decode()


def test_seal_unseal():
    sealer = SecretSealer(_key())
    token = sealer.seal("JBSWY3DPEHPK3PXP")
    assert token != "JBSWY3DPEHPK3PXP"
    assert sealer.unseal(token) == "JBSWY3DPEHPK3PXP"


def test_seal_uses_fresh_nonce():
    sealer = SecretSealer(_key())
    assert sealer.seal("GEZDGNBV") != sealer.seal("GEZDGNBV")


def test_from_settings_uses_master_key():
    key = _key()
    token = SecretSealer(key).seal("GEZDGNBV")
    assert SecretSealer.from_settings(Settings(_env_file=None, master_key=key)).unseal(token) == "GEZDGNBV"


def test_from_settings_defaults_to_global_settings(monkeypatch):
    key = _key()
    monkeypatch.setattr("shophub_2fa.crypto.settings", Settings(_env_file=None, master_key=key))
    token = SecretSealer.from_settings().seal("GEZDGNBV")
    assert SecretSealer(key).unseal(token) == "GEZDGNBV"


def test_missing_key_raises():
    with pytest.raises(RuntimeError, match="SHOPHUB_2FA_MASTER_KEY not set"):
        SecretSealer.from_settings(Settings(_env_file=None, master_key=""))


def test_short_key_raises():
    with pytest.raises(ValueError, match="must be 32 bytes"):
        SecretSealer(_key(16))


def test_tampered_token_rejected():
    sealer = SecretSealer(_key())
    raw = bytearray(base64.b64decode(sealer.seal("GEZDGNBV")))
    raw[-1] ^= 0x01
    with pytest.raises(InvalidTag):
        sealer.unseal(base64.b64encode(bytes(raw)).decode())
