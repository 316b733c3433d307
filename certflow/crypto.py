"""
Symmetric document encryption for certflow.

Implements the ``OPEN-ATTESTATION-TYPE-1`` envelope:

- AES-256-GCM, 96-bit IV, 128-bit tag
- key is hex, ``iv`` / ``tag`` / ``cipherText`` are base64
- the plaintext under encryption is the base64 encoding of the UTF-8 document

All operations use the `cryptography` library.
"""

from __future__ import annotations

import base64
import os

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from .errors import DecryptionError

ENCRYPTION_TYPE = "OPEN-ATTESTATION-TYPE-1"
KEY_LENGTH_BITS = 256
IV_LENGTH_BYTES = 12
TAG_LENGTH_BYTES = 16


def generate_encryption_key(length: int = KEY_LENGTH_BITS) -> str:
    """Return a fresh random key as a hex string."""
    return os.urandom(length // 8).hex()


def encrypt_string(document: str, key: str | None = None) -> dict:
    """Encrypt *document* and return the envelope fields, key included."""
    key = key or generate_encryption_key()
    iv = os.urandom(IV_LENGTH_BYTES)
    encoded = base64.b64encode(document.encode("utf-8"))
    sealed = AESGCM(bytes.fromhex(key)).encrypt(iv, encoded, None)
    cipher_text, tag = sealed[:-TAG_LENGTH_BYTES], sealed[-TAG_LENGTH_BYTES:]
    return {
        "cipherText": base64.b64encode(cipher_text).decode(),
        "iv": base64.b64encode(iv).decode(),
        "tag": base64.b64encode(tag).decode(),
        "key": key,
        "type": ENCRYPTION_TYPE,
    }


def decrypt_string(
    tag: str,
    cipher_text: str,
    iv: str,
    key: str,
    type_: str = ENCRYPTION_TYPE,
) -> str:
    """Decrypt an envelope back to the original document string.

    Raises DecryptionError on any failure; callers do not retry.
    """
    if type_ != ENCRYPTION_TYPE:
        raise DecryptionError(f"Unsupported encryption type: {type_}")
    if not (tag and cipher_text and iv and key):
        raise DecryptionError("Encrypted document is missing tag, cipherText, iv or key")

    try:
        aes = AESGCM(bytes.fromhex(key))
        sealed = base64.b64decode(cipher_text) + base64.b64decode(tag)
        encoded = aes.decrypt(base64.b64decode(iv), sealed, None)
        return base64.b64decode(encoded).decode("utf-8")
    except InvalidTag as e:
        raise DecryptionError("Error decrypting message") from e
    except (TypeError, ValueError) as e:
        raise DecryptionError(f"Error decrypting message: {e}") from e
