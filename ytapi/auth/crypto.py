"""Sealing of stored OAuth refresh tokens with AES-256-GCM."""

import base64
import os

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

NONCE_SIZE = 12

_KEY_HINT = (
    'Generate with: python -c "import secrets, base64; '
    'print(base64.b64encode(secrets.token_bytes(32)).decode())"'
)


def validate_encryption_key(enc_key: str | bytes) -> bytes:
    """
    Validate and convert an encryption key to its 32-byte form.

    String keys must be base64-encoded.

    Args:
        enc_key: Encryption key as base64 string or raw bytes

    Returns:
        32-byte encryption key

    Raises:
        ValueError: If key is invalid format or wrong length
    """
    if isinstance(enc_key, str):
        try:
            key = base64.b64decode(enc_key, validate=True)
        except ValueError as e:
            raise ValueError(f"Encryption key must be base64-encoded. {_KEY_HINT}") from e
    else:
        key = enc_key

    if len(key) != 32:
        raise ValueError(
            f"Encryption key must be exactly 32 bytes, got {len(key)} bytes. {_KEY_HINT}"
        )
    return key


def seal_refresh_token(key: bytes, refresh_token: str) -> bytes:
    """Encrypt a refresh token; the result is the nonce followed by the ciphertext."""
    nonce = os.urandom(NONCE_SIZE)
    return nonce + AESGCM(validate_encryption_key(key)).encrypt(
        nonce, refresh_token.encode("utf-8"), None
    )


def unseal_refresh_token(key: bytes, blob: bytes) -> str:
    """
    Decrypt a blob produced by :func:`seal_refresh_token`.

    Raises:
        ValueError: If the key is invalid, the blob is truncated, or the
            blob was tampered with / sealed under another key
    """
    if len(blob) < NONCE_SIZE:
        raise ValueError(f"Sealed token too short (must include {NONCE_SIZE}-byte nonce)")

    aes = AESGCM(validate_encryption_key(key))
    try:
        plaintext = aes.decrypt(blob[:NONCE_SIZE], blob[NONCE_SIZE:], None)
    except InvalidTag as e:
        raise ValueError("Sealed token could not be authenticated") from e
    return plaintext.decode("utf-8")
