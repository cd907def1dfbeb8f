"""
AES-256-GCM sealing of the submission document.

The whole submission list is serialised to JSON and sealed as a single
envelope ``{"iv", "authTag", "data"}`` with hex-encoded fields.
"""

from __future__ import annotations

import hashlib
import json
import logging
import os
from typing import Any

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from contact_backend.errors import ConfigurationError, DecryptionError

logger = logging.getLogger(__name__)

NONCE_BYTES = 16
TAG_BYTES = 16
MIN_SECRET_LENGTH = 32
DEV_SECRET = "contact-backend-dev-key-change-in-production"


def derive_key(secret: str | None, *, production: bool = False) -> bytes:
    """
    Derive the 32-byte AES key from the configured secret.

    Short or missing secrets are refused in production and replaced by a
    fixed development secret elsewhere.
    """
    if not secret or len(secret) < MIN_SECRET_LENGTH:
        if production:
            raise ConfigurationError(
                "ENCRYPTION_KEY must be set to at least "
                f"{MIN_SECRET_LENGTH} characters in production"
            )
        logger.warning(
            "ENCRYPTION_KEY not set or too short; using the development key"
        )
        secret = DEV_SECRET
    return hashlib.sha256(secret.encode("utf-8")).digest()


def encrypt(payload: Any, key: bytes) -> dict:
    nonce = os.urandom(NONCE_BYTES)
    plaintext = json.dumps(payload, ensure_ascii=False).encode("utf-8")
    sealed = AESGCM(key).encrypt(nonce, plaintext, None)
    return {
        "iv": nonce.hex(),
        "authTag": sealed[-TAG_BYTES:].hex(),
        "data": sealed[:-TAG_BYTES].hex(),
    }


def decrypt(envelope: dict, key: bytes) -> Any:
    try:
        nonce = bytes.fromhex(envelope["iv"])
        tag = bytes.fromhex(envelope["authTag"])
        ciphertext = bytes.fromhex(envelope["data"])
    except (KeyError, TypeError, ValueError) as exc:
        raise DecryptionError(f"Malformed envelope: {exc}") from exc

    try:
        plaintext = AESGCM(key).decrypt(nonce, ciphertext + tag, None)
    except InvalidTag as exc:
        raise DecryptionError(
            "Authentication failed: wrong key or tampered data"
        ) from exc
    return json.loads(plaintext.decode("utf-8"))
