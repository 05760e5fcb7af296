"""Security helpers: password key derivation and sealed-blob encryption for LockDrop.

This package provides:
- PBKDF2-HMAC-SHA256 key derivation from a password and per-blob salt
- AES-256-GCM sealing/opening with the ``salt || nonce || ciphertext`` frame

Both are stateless free functions and are safe to call from any thread.
"""

from .kdf import generate_salt, derive_key
from .sealed_blob import SealedBlob, parse_blob, seal, open_blob

__all__ = [
    "generate_salt",
    "derive_key",
    "SealedBlob",
    "parse_blob",
    "seal",
    "open_blob",
]
