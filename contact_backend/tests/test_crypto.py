import unittest

from contact_backend import crypto
from contact_backend.errors import ConfigurationError, DecryptionError


class EnvelopeCryptoTests(unittest.TestCase):
    def setUp(self):
        self.key = crypto.derive_key("k" * 32)

    def test_roundtrip_preserves_list(self):
        submissions = [
            {"id": "1", "company": "Müller & Söhne", "interests": ["animation"]},
            {"id": "2", "company": "Acme", "consent": True},
        ]
        envelope = crypto.encrypt(submissions, self.key)
        self.assertEqual(set(envelope), {"iv", "authTag", "data"})
        self.assertEqual(crypto.decrypt(envelope, self.key), submissions)

    def test_roundtrip_empty_list(self):
        envelope = crypto.encrypt([], self.key)
        self.assertEqual(crypto.decrypt(envelope, self.key), [])

    def test_fresh_nonce_per_write(self):
        first = crypto.encrypt([{"a": 1}], self.key)
        second = crypto.encrypt([{"a": 1}], self.key)
        self.assertNotEqual(first["iv"], second["iv"])
        self.assertEqual(len(bytes.fromhex(first["iv"])), crypto.NONCE_BYTES)

    def test_tampered_data_fails_closed(self):
        envelope = crypto.encrypt([{"a": 1}], self.key)
        flipped = format(int(envelope["data"][:2], 16) ^ 0x01, "02x")
        envelope["data"] = flipped + envelope["data"][2:]
        with self.assertRaises(DecryptionError):
            crypto.decrypt(envelope, self.key)

    def test_wrong_key_fails_closed(self):
        envelope = crypto.encrypt([{"a": 1}], self.key)
        with self.assertRaises(DecryptionError):
            crypto.decrypt(envelope, crypto.derive_key("z" * 32))

    def test_malformed_envelope(self):
        with self.assertRaises(DecryptionError):
            crypto.decrypt({"iv": "zz", "authTag": "", "data": ""}, self.key)

    def test_short_secret_rejected_in_production(self):
        with self.assertRaises(ConfigurationError):
            crypto.derive_key("short", production=True)

    def test_short_secret_uses_dev_key_outside_production(self):
        with self.assertLogs("contact_backend.crypto", level="WARNING"):
            key = crypto.derive_key("")
        self.assertEqual(key, crypto.derive_key(crypto.DEV_SECRET))
        self.assertEqual(len(key), 32)


if __name__ == "__main__":
    unittest.main()
