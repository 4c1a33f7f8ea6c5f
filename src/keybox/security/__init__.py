"""Security helpers: key derivation, vault encryption and password generation.

This package provides:
- PBKDF2-HMAC-SHA1 key derivation from a passphrase and the wallet salt
- AES-256-GCM encryption of vault payloads into a base64 envelope
- random password generation from configurable character classes

The wallet session lives in :mod:`keybox.security.session`; it depends on
:mod:`keybox.core.wallet` and is imported from there directly.
"""

from .kdf import derive_key
from .encryption import encrypt, decrypt
from .password import random_string, PasswordPolicy

__all__ = [
    "derive_key",
    "encrypt",
    "decrypt",
    "random_string",
    "PasswordPolicy",
]
