"""
Admin session storage.

Supports an in-memory store for tests/single-process runs and a Redis-backed
store whose keys expire on their own.
"""

from __future__ import annotations

import secrets
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Protocol

import redis


class SessionStatus(Enum):
    VALID = "valid"
    UNKNOWN = "unknown"
    EXPIRED = "expired"


def new_token() -> str:
    return secrets.token_hex(32)


class SessionStore(Protocol):
    """Minimal interface for issuing and checking admin bearer tokens."""

    def create(self) -> str:
        ...

    def check(self, token: str) -> SessionStatus:
        ...

    def revoke(self, token: str) -> None:
        ...


@dataclass
class InMemorySessionStore:
    """Token -> expiry map with a sliding timeout."""

    timeout_seconds: float = 3600
    clock: Callable[[], float] = time.time
    sessions: dict[str, float] = field(default_factory=dict)

    def create(self) -> str:
        token = new_token()
        self.sessions[token] = self.clock() + self.timeout_seconds
        return token

    def check(self, token: str) -> SessionStatus:
        expires_at = self.sessions.get(token)
        if expires_at is None:
            return SessionStatus.UNKNOWN
        now = self.clock()
        if now > expires_at:
            self.sessions.pop(token, None)
            return SessionStatus.EXPIRED
        self.sessions[token] = now + self.timeout_seconds
        return SessionStatus.VALID

    def revoke(self, token: str) -> None:
        self.sessions.pop(token, None)

    def reset(self) -> None:
        """Drop all sessions (useful in tests)."""
        self.sessions.clear()


@dataclass
class RedisSessionStore:
    """
    Redis-backed sessions. Expired keys are evicted by Redis, so an expired
    token reads as unknown.
    """

    url: str
    timeout_seconds: int = 3600
    key_prefix: str = "contact:admin-session:"

    def __post_init__(self):
        self.client = redis.Redis.from_url(self.url)

    def _key(self, token: str) -> str:
        return f"{self.key_prefix}{token}"

    def create(self) -> str:
        token = new_token()
        self.client.set(self._key(token), int(time.time()), ex=self.timeout_seconds)
        return token

    def check(self, token: str) -> SessionStatus:
        # EXPIRE returns False when the key no longer exists.
        if self.client.expire(self._key(token), self.timeout_seconds):
            return SessionStatus.VALID
        return SessionStatus.UNKNOWN

    def revoke(self, token: str) -> None:
        self.client.delete(self._key(token))
