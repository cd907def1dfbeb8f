"""
Dependency wiring for the FastAPI app.
"""

from __future__ import annotations

from contact_backend import crypto
from contact_backend.config import get_settings
from contact_backend.mailer import Mailer, SmtpMailer
from contact_backend.sessions import (
    InMemorySessionStore,
    RedisSessionStore,
    SessionStore,
)
from contact_backend.store import EncryptedFileStore, SubmissionStore

_submission_store: SubmissionStore | None = None
_session_store: SessionStore | None = None
_mailer: Mailer | None = None


def get_submission_store() -> SubmissionStore:
    """
    Return a singleton store so every request shares the same write lock.
    """
    global _submission_store
    if _submission_store:
        return _submission_store

    settings = get_settings()
    key = crypto.derive_key(
        settings.encryption_key, production=settings.is_production
    )
    _submission_store = EncryptedFileStore(
        data_dir=settings.data_path,
        key=key,
        retention_days=settings.retention_days,
    )
    return _submission_store


def get_session_store() -> SessionStore:
    """
    Return a singleton admin session store (Redis when configured).
    """
    global _session_store
    if _session_store:
        return _session_store

    settings = get_settings()
    if settings.redis_url:
        _session_store = RedisSessionStore(
            url=settings.redis_url,
            timeout_seconds=settings.admin_session_timeout_seconds,
            key_prefix=settings.redis_session_prefix,
        )
    else:
        _session_store = InMemorySessionStore(
            timeout_seconds=settings.admin_session_timeout_seconds
        )
    return _session_store


def get_mailer() -> Mailer:
    global _mailer
    if _mailer:
        return _mailer
    _mailer = SmtpMailer(get_settings())
    return _mailer
