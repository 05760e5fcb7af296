"""Password-sealed blobs: PBKDF2-derived key + AES-256-GCM with a self-describing frame.

Blob layout (binary):
- 16 bytes: salt (PBKDF2)
- 12 bytes: nonce (AES-GCM)
- N bytes: ciphertext followed by the 16-byte GCM tag

Everything needed to open a blob except the password travels inside it, so the
storage layer can treat blobs as opaque bytes. Each call derives its own key and
draws its own salt and nonce; nothing is retained between calls.
"""
import os
from dataclasses import dataclass

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from lockdrop.core.exceptions import (
    AuthenticationFailedError,
    CipherConfigurationError,
    MalformedBlobError,
)
from .kdf import SALT_SIZE, KEY_SIZE, derive_key, generate_salt


NONCE_SIZE = 12
TAG_SIZE = 16
HEADER_SIZE = SALT_SIZE + NONCE_SIZE


@dataclass(frozen=True)
class SealedBlob:
    """The three fields of a sealed blob, split at their fixed offsets."""

    salt: bytes
    nonce: bytes
    body: bytes

    def to_bytes(self) -> bytes:
        return self.salt + self.nonce + self.body


def parse_blob(blob: bytes) -> SealedBlob:
    """Split ``blob`` into salt, nonce and ciphertext||tag.

    Raises :class:`MalformedBlobError` if the blob cannot hold a salt and nonce.
    """
    if len(blob) < HEADER_SIZE:
        raise MalformedBlobError(
            f"blob too short to contain salt and nonce ({len(blob)} < {HEADER_SIZE} bytes)"
        )
    return SealedBlob(
        salt=bytes(blob[:SALT_SIZE]),
        nonce=bytes(blob[SALT_SIZE:HEADER_SIZE]),
        body=bytes(blob[HEADER_SIZE:]),
    )


def _cipher(key: bytes) -> AESGCM:
    if len(key) != KEY_SIZE:
        raise CipherConfigurationError(f"derived key has wrong length ({len(key)} bytes)")
    try:
        return AESGCM(key)
    except ValueError as e:
        raise CipherConfigurationError(f"failed to create cipher: {e}") from e


def seal(plaintext: bytes, password: bytes | str) -> bytes:
    """
    Encrypt ``plaintext`` under a key derived from ``password``.

    A fresh salt and nonce are drawn for this call only. Returns
    ``salt || nonce || ciphertext || tag``.
    """
    salt = generate_salt()
    nonce = os.urandom(NONCE_SIZE)
    aead = _cipher(derive_key(password, salt))
    ct = aead.encrypt(nonce, plaintext, None)
    return SealedBlob(salt=salt, nonce=nonce, body=ct).to_bytes()


def open_blob(blob: bytes, password: bytes | str) -> bytes:
    """
    Decrypt a blob produced by :func:`seal`.

    Raises :class:`MalformedBlobError` before deriving anything if the blob is
    shorter than the header, and :class:`AuthenticationFailedError` for both a
    wrong password and a tampered body.
    """
    frame = parse_blob(blob)
    aead = _cipher(derive_key(password, frame.salt))
    try:
        return aead.decrypt(frame.nonce, frame.body, None)
    except InvalidTag:
        raise AuthenticationFailedError("decryption failed") from None
