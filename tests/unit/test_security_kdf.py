"""Unit tests for the Key Derivation Function (KDF) module."""

import pytest
from keybox.security.kdf import derive_key, ITERATIONS


def test_derive_key_defaults():
    """Default derivation returns a 256-bit key."""
    key = derive_key("passphrase", "default")
    assert isinstance(key, bytes)
    assert len(key) == 32


def test_derive_key_rfc6070_vector():
    """PBKDF2-HMAC-SHA1 test vector from RFC 6070 (c=4096, dkLen=20)."""
    key = derive_key(b"password", b"salt", iterations=4096, key_len=20)
    assert key.hex() == "4b007901b765489abead49d926f721d065a429c1"


def test_derive_key_str_and_bytes_consistency():
    """Passing passphrase and salt as str or bytes yields the same key."""
    assert derive_key("password123", "wallet") == derive_key(b"password123", b"wallet")


def test_derive_key_depends_on_salt():
    """The same passphrase gives different keys for different wallets."""
    assert derive_key("same", "personal") != derive_key("same", "work")


def test_derive_key_depends_on_passphrase():
    assert derive_key("one", "wallet") != derive_key("two", "wallet")


def test_default_iterations():
    assert ITERATIONS == 4096
