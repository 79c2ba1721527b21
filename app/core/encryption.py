# app/core/encryption.py
"""
AES-256-GCM helper for QR data stored at rest.

Stored values are JSON envelopes ``{"encrypted", "iv", "authTag"}`` with every
field hex encoded. The plaintext inside the envelope is itself JSON, so any
JSON-serializable value survives a round trip.
"""
import json
import os
from functools import lru_cache
from typing import Any, Dict

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from app.core.config import settings

AAD = b"qr-data"
IV_LENGTH = 12  # 96-bit IV for GCM
TAG_LENGTH = 16


class EncryptionError(Exception):
    """Raised when data cannot be encrypted or decrypted"""


@lru_cache(maxsize=4)
def _load_key(hex_key: str) -> bytes:
    if not hex_key:
        raise EncryptionError("ENCRYPTION_KEY environment variable is required")
    try:
        key = bytes.fromhex(hex_key)
    except ValueError:
        raise EncryptionError("ENCRYPTION_KEY must be hex encoded")
    if len(key) != 32:
        raise EncryptionError("ENCRYPTION_KEY must be 32 bytes (64 hex characters)")
    return key


def get_key() -> bytes:
    return _load_key(settings.ENCRYPTION_KEY)


def encrypt(text: str) -> Dict[str, str]:
    """Encrypt a string, returning the hex-encoded envelope fields."""
    iv = os.urandom(IV_LENGTH)
    sealed = AESGCM(get_key()).encrypt(iv, text.encode("utf-8"), AAD)
    # cryptography appends the tag to the ciphertext
    ciphertext, tag = sealed[:-TAG_LENGTH], sealed[-TAG_LENGTH:]
    return {
        "encrypted": ciphertext.hex(),
        "iv": iv.hex(),
        "authTag": tag.hex(),
    }


def decrypt(envelope: Dict[str, str]) -> str:
    """Decrypt an envelope produced by :func:`encrypt`."""
    try:
        iv = bytes.fromhex(envelope["iv"])
        sealed = bytes.fromhex(envelope["encrypted"]) + bytes.fromhex(envelope["authTag"])
    except (KeyError, TypeError, ValueError):
        raise EncryptionError("Malformed encrypted payload")
    try:
        plaintext = AESGCM(get_key()).decrypt(iv, sealed, AAD)
    except InvalidTag:
        raise EncryptionError("Authentication tag mismatch")
    return plaintext.decode("utf-8")


def encrypt_qr_data(data: Any) -> str:
    """Serialize and encrypt a value for storage in a text column."""
    return json.dumps(encrypt(json.dumps(data)))


def decrypt_qr_data(stored: str) -> Any:
    """Inverse of :func:`encrypt_qr_data`."""
    try:
        envelope = json.loads(stored)
    except (TypeError, ValueError):
        raise EncryptionError("Stored value is not an encrypted envelope")
    if not isinstance(envelope, dict):
        raise EncryptionError("Stored value is not an encrypted envelope")
    return json.loads(decrypt(envelope))
