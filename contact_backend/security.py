"""
Hashing and redaction helpers shared by the contact and admin routes.
"""

from __future__ import annotations

import hashlib
import hmac

PBKDF2_ITERATIONS = 100_000
PBKDF2_KEY_LENGTH = 64


def hash_password(password: str, token_secret: str) -> str:
    salt = hashlib.sha256(token_secret.encode("utf-8")).hexdigest()[:32]
    digest = hashlib.pbkdf2_hmac(
        "sha512",
        password.encode("utf-8"),
        salt.encode("utf-8"),
        PBKDF2_ITERATIONS,
        dklen=PBKDF2_KEY_LENGTH,
    )
    return digest.hex()


def verify_password(candidate: str, configured: str | None, token_secret: str) -> bool:
    """Compare hashes of both passwords in constant time."""
    if not configured:
        return False
    return hmac.compare_digest(
        hash_password(candidate, token_secret),
        hash_password(configured, token_secret),
    )


def hash_ip(ip: str, salt: str) -> str:
    return hmac.new(
        salt.encode("utf-8"), ip.encode("utf-8"), hashlib.sha256
    ).hexdigest()[:16]


def redact_email(email: str) -> str:
    return f"{(email or '')[:3]}***"


def short_id(submission_id: str) -> str:
    """
    Five-digit display id derived from a UUID.

    Deterministic but not unique: different ids may map to the same value.
    """
    cleaned = submission_id.replace("-", "")
    value = int(cleaned[:10], 16)
    return str(value % 90000 + 10000)
