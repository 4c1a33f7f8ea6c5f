"""
Authenticated encryption of vault payloads.

Envelope layout (base64 text):
- 12 bytes: random nonce, fresh for every call
- N bytes: AES-256-GCM ciphertext followed by the 16-byte tag

No associated data is used. The key is derived from the passphrase and the
vault salt with :func:`keybox.security.kdf.derive_key`, so a wrong passphrase,
a wrong salt and a corrupted envelope all end up as the same tag failure.
"""

from __future__ import annotations

import base64
import binascii
import os

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from .kdf import derive_key
from ..core.exceptions import AuthenticationError

NONCE_SIZE = 12
TAG_SIZE = 16


def encrypt(plaintext: bytes, passphrase: str, salt: str) -> str:
    """
    Encrypt ``plaintext`` and return the base64 envelope.

    Encryption details:
    - key from PBKDF2-HMAC-SHA1 (4096 iterations, 256 bits)
    - AES-256-GCM (via :class:`cryptography.hazmat.primitives.ciphers.aead.AESGCM`)
    - fresh 96-bit random nonce per call

    The output differs on every call even for identical inputs.
    """
    key = derive_key(passphrase, salt)
    aead = AESGCM(key)
    nonce = os.urandom(NONCE_SIZE)
    ct = aead.encrypt(nonce, plaintext, None)
    return base64.b64encode(nonce + ct).decode("ascii")


def decrypt(envelope: str | bytes, passphrase: str, salt: str) -> bytes:
    """
    Decrypt an envelope produced by :func:`encrypt` and return plaintext.

    Raises :class:`AuthenticationError` if the envelope is not valid base64,
    is too short, or fails the GCM tag check.
    """
    if isinstance(envelope, str):
        envelope = envelope.encode("ascii", errors="replace")
    envelope = envelope.strip()

    try:
        blob = base64.b64decode(envelope, validate=True)
    except (binascii.Error, ValueError) as err:
        raise AuthenticationError("vault content is not a valid envelope") from err

    # unused trailing bits must be zero, otherwise two texts map to one blob
    if base64.b64encode(blob) != envelope:
        raise AuthenticationError("vault content is not a canonical envelope")

    if len(blob) < NONCE_SIZE + TAG_SIZE:
        raise AuthenticationError("ciphertext too short to contain nonce and tag")

    key = derive_key(passphrase, salt)
    nonce, ct = blob[:NONCE_SIZE], blob[NONCE_SIZE:]
    aead = AESGCM(key)
    try:
        return aead.decrypt(nonce, ct, None)
    except InvalidTag as err:
        raise AuthenticationError("wrong passphrase or corrupted vault") from err
