import json
import tempfile
import unittest
from datetime import datetime, timedelta, timezone
from pathlib import Path

from contact_backend import crypto
from contact_backend.errors import DecryptionError
from contact_backend.store import EncryptedFileStore, parse_timestamp


class FakeClock:
    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


def make_submission(email: str, company: str = "Acme") -> dict:
    return {
        "name": "Jane",
        "company": company,
        "email": email,
        "interests": ["3d-modell"],
        "interestOther": "",
        "website": "",
        "budget": "",
        "deadline": "",
        "message": "Hello",
        "consent": True,
        "consentTimestamp": "2026-01-01T00:00:00.000Z",
        "submittedAt": "2026-01-01T00:00:00.000Z",
        "ipHash": "abcdef0123456789",
    }


class EncryptedFileStoreTests(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self._tmp.cleanup)
        self.data_dir = Path(self._tmp.name) / "data"
        self.now = datetime(2026, 6, 1, 12, 0, tzinfo=timezone.utc)
        self.clock = FakeClock(self.now)
        self.key = crypto.derive_key("k" * 32)
        self.store = EncryptedFileStore(
            data_dir=self.data_dir,
            key=self.key,
            retention_days=180,
            clock=self.clock,
        )

    def audit_actions(self) -> list[str]:
        lines = self.store.audit_log_path.read_text(encoding="utf-8").splitlines()
        return [json.loads(line)["action"] for line in lines]

    def test_missing_file_reads_as_empty(self):
        self.assertEqual(self.store.read_all(), [])
        self.assertFalse(self.store.submissions_path.exists())

    def test_save_stamps_id_and_expiry(self):
        submission_id = self.store.save(make_submission("jane@acme.de"))
        stored = self.store.get(submission_id)
        self.assertIsNotNone(stored)
        self.assertEqual(stored["createdAt"], "2026-06-01T12:00:00.000Z")
        created = parse_timestamp(stored["createdAt"])
        expires = parse_timestamp(stored["expiresAt"])
        self.assertEqual(expires - created, timedelta(days=180))

    def test_file_is_encrypted_envelope(self):
        self.store.save(make_submission("jane@acme.de"))
        raw = self.store.submissions_path.read_text(encoding="utf-8")
        self.assertNotIn("jane@acme.de", raw)
        envelope = json.loads(raw)
        self.assertEqual(set(envelope), {"iv", "authTag", "data"})
        self.assertEqual(len(crypto.decrypt(envelope, self.key)), 1)

    def test_save_audit_redacts_email(self):
        submission_id = self.store.save(make_submission("jane@acme.de"))
        entry = json.loads(
            self.store.audit_log_path.read_text(encoding="utf-8").splitlines()[0]
        )
        self.assertEqual(entry["action"], "SUBMISSION_CREATED")
        self.assertEqual(entry["details"]["id"], submission_id)
        self.assertEqual(entry["details"]["email"], "jan***")

    def test_unique_ids(self):
        ids = {self.store.save(make_submission(f"u{i}@acme.de")) for i in range(5)}
        self.assertEqual(len(ids), 5)
        self.assertEqual(len(self.store.read_all()), 5)

    def test_delete_by_id(self):
        keep = self.store.save(make_submission("a@acme.de"))
        drop = self.store.save(make_submission("b@acme.de"))
        self.assertTrue(self.store.delete_by_id(drop))
        self.assertFalse(self.store.delete_by_id(drop))
        self.assertEqual([s["id"] for s in self.store.read_all()], [keep])
        self.assertIn("SUBMISSION_DELETED", self.audit_actions())

    def test_delete_by_email_is_case_insensitive(self):
        self.store.save(make_submission("A@x.com"))
        self.store.save(make_submission("a@x.com"))
        other = self.store.save(make_submission("someone@else.com"))

        self.assertEqual(self.store.delete_by_email("a@x.com"), 2)
        remaining = self.store.read_all()
        self.assertEqual([s["id"] for s in remaining], [other])

    def test_delete_by_email_without_match_leaves_file_untouched(self):
        self.store.save(make_submission("a@x.com"))
        before = self.store.submissions_path.read_text(encoding="utf-8")
        self.assertEqual(self.store.delete_by_email("nobody@x.com"), 0)
        self.assertEqual(self.store.submissions_path.read_text(encoding="utf-8"), before)
        self.assertNotIn("SUBMISSIONS_DELETED_BY_EMAIL", self.audit_actions())

    def test_export_by_email_strips_internal_fields(self):
        submission_id = self.store.save(make_submission("Jane@Acme.de"))
        self.store.save(make_submission("other@acme.de"))

        exported = self.store.export_by_email("  jane@acme.DE ")
        self.assertEqual(len(exported), 1)
        item = exported[0]
        self.assertEqual(item["id"], submission_id)
        self.assertEqual(item["submittedAt"], "2026-06-01T12:00:00.000Z")
        for internal in ("ipHash", "expiresAt", "consentTimestamp", "createdAt"):
            self.assertNotIn(internal, item)
        self.assertIn("DATA_EXPORT", self.audit_actions())

    def test_cleanup_removes_only_expired(self):
        self.clock.now = self.now - timedelta(days=200)
        old = self.store.save(make_submission("old@acme.de"))
        self.clock.now = self.now - timedelta(days=10)
        recent = self.store.save(make_submission("recent@acme.de"))
        self.clock.now = self.now

        self.assertEqual(self.store.cleanup_expired(), 1)
        ids = [s["id"] for s in self.store.read_all()]
        self.assertNotIn(old, ids)
        self.assertEqual(ids, [recent])
        self.assertIn("DATA_CLEANUP", self.audit_actions())

    def test_cleanup_is_idempotent(self):
        self.clock.now = self.now - timedelta(days=181)
        self.store.save(make_submission("old@acme.de"))
        self.clock.now = self.now
        self.store.save(make_submission("new@acme.de"))

        self.assertEqual(self.store.cleanup_expired(), 1)
        self.assertEqual(self.store.cleanup_expired(), 0)
        self.assertEqual(len(self.store.read_all()), 1)

    def test_tampered_store_raises(self):
        self.store.save(make_submission("a@acme.de"))
        envelope = json.loads(self.store.submissions_path.read_text(encoding="utf-8"))
        envelope["authTag"] = "00" * 16
        self.store.submissions_path.write_text(json.dumps(envelope), encoding="utf-8")
        with self.assertRaises(DecryptionError):
            self.store.read_all()
        with self.assertRaises(DecryptionError):
            self.store.save(make_submission("b@acme.de"))

    def test_wrong_key_cannot_read(self):
        self.store.save(make_submission("a@acme.de"))
        other = EncryptedFileStore(
            data_dir=self.data_dir, key=crypto.derive_key("x" * 32)
        )
        with self.assertRaises(DecryptionError):
            other.read_all()

    def test_admin_access_is_prefixed(self):
        self.store.log_admin_access("LIST_SUBMISSIONS", {"count": 0})
        self.assertEqual(self.audit_actions(), ["ADMIN_LIST_SUBMISSIONS"])


if __name__ == "__main__":
    unittest.main()
