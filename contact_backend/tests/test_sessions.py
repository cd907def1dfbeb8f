import unittest
from unittest.mock import patch

from contact_backend.sessions import (
    InMemorySessionStore,
    RedisSessionStore,
    SessionStatus,
)


class MutableClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


class InMemorySessionStoreTests(unittest.TestCase):
    def setUp(self):
        self.clock = MutableClock()
        self.sessions = InMemorySessionStore(timeout_seconds=60, clock=self.clock)

    def test_create_and_check(self):
        token = self.sessions.create()
        self.assertEqual(len(token), 64)
        self.assertEqual(self.sessions.check(token), SessionStatus.VALID)

    def test_unknown_token(self):
        self.assertEqual(self.sessions.check("nope"), SessionStatus.UNKNOWN)

    def test_expiry_and_eviction(self):
        token = self.sessions.create()
        self.clock.now += 61
        self.assertEqual(self.sessions.check(token), SessionStatus.EXPIRED)
        self.assertEqual(self.sessions.check(token), SessionStatus.UNKNOWN)

    def test_activity_slides_expiry(self):
        token = self.sessions.create()
        self.clock.now += 50
        self.assertEqual(self.sessions.check(token), SessionStatus.VALID)
        self.clock.now += 50
        self.assertEqual(self.sessions.check(token), SessionStatus.VALID)

    def test_revoke(self):
        token = self.sessions.create()
        self.sessions.revoke(token)
        self.assertEqual(self.sessions.check(token), SessionStatus.UNKNOWN)


class RedisSessionStoreTests(unittest.TestCase):
    @patch("contact_backend.sessions.redis.Redis.from_url")
    def test_uses_key_ttl(self, mock_from_url):
        client = mock_from_url.return_value
        sessions = RedisSessionStore(
            url="redis://localhost:6379/0", timeout_seconds=120, key_prefix="t:"
        )

        token = sessions.create()
        key, _ = client.set.call_args.args
        self.assertEqual(key, f"t:{token}")
        self.assertEqual(client.set.call_args.kwargs["ex"], 120)

        client.expire.return_value = True
        self.assertEqual(sessions.check(token), SessionStatus.VALID)
        client.expire.assert_called_with(f"t:{token}", 120)

        client.expire.return_value = False
        self.assertEqual(sessions.check(token), SessionStatus.UNKNOWN)

        sessions.revoke(token)
        client.delete.assert_called_with(f"t:{token}")


if __name__ == "__main__":
    unittest.main()
