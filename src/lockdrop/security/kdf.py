import os

from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC


SALT_SIZE = 16
KEY_SIZE = 32
PBKDF2_ITERATIONS = 100_000


def generate_salt() -> bytes:
    """Return a cryptographically secure random salt."""
    return os.urandom(SALT_SIZE)


def derive_key(password: bytes | str, salt: bytes) -> bytes:
    """
    Derive a 32-byte key from a password using PBKDF2-HMAC-SHA256.

    The password is treated as an opaque byte string; a ``str`` is encoded
    as UTF-8 without any normalization. The salt must be exactly
    ``SALT_SIZE`` bytes.
    """
    if isinstance(password, str):
        password = password.encode("utf-8")
    if len(salt) != SALT_SIZE:
        raise ValueError(f"salt must be {SALT_SIZE} bytes, got {len(salt)}")

    kdf = PBKDF2HMAC(
        algorithm=hashes.SHA256(),
        length=KEY_SIZE,
        salt=salt,
        iterations=PBKDF2_ITERATIONS,
    )
    return kdf.derive(password)

