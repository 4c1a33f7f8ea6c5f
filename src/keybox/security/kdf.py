"""Key derivation for KeyBox vaults."""
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

ITERATIONS = 4096
KEY_LEN = 32


def derive_key(
    passphrase: bytes | str,
    salt: bytes | str,
    iterations: int = ITERATIONS,
    key_len: int = KEY_LEN,
) -> bytes:
    """
    Derive a symmetric key from a passphrase using PBKDF2-HMAC-SHA1.
    Returns raw derived key bytes.
    """
    if isinstance(passphrase, str):
        passphrase = passphrase.encode("utf-8")
    if isinstance(salt, str):
        salt = salt.encode("utf-8")

    kdf = PBKDF2HMAC(
        algorithm=hashes.SHA1(),
        length=key_len,
        salt=salt,
        iterations=iterations,
    )
    return kdf.derive(passphrase)
