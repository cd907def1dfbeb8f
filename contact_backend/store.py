"""
Encrypted on-disk storage for contact submissions.

All submissions live in one AES-GCM envelope (``submissions.enc``) that is
rewritten as a whole on every mutation. Data-access events are appended to a
plaintext JSON-lines audit log next to it.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
import threading
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Callable, Optional, Protocol

from contact_backend import crypto
from contact_backend.security import redact_email

logger = logging.getLogger(__name__)

SUBMISSIONS_FILENAME = "submissions.enc"
AUDIT_LOG_FILENAME = "audit.log"

EXPORT_FIELDS = (
    "id",
    "name",
    "company",
    "email",
    "interests",
    "interestOther",
    "website",
    "budget",
    "deadline",
    "message",
)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def format_timestamp(value: datetime) -> str:
    """Render an aware datetime as ``YYYY-MM-DDTHH:MM:SS.mmmZ``."""
    value = value.astimezone(timezone.utc)
    return value.strftime("%Y-%m-%dT%H:%M:%S.") + f"{value.microsecond // 1000:03d}Z"


def parse_timestamp(value: str) -> datetime:
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


class SubmissionStore(Protocol):
    """Operations the API needs from submission storage."""

    def save(self, data: dict) -> str:
        ...

    def read_all(self) -> list[dict]:
        ...

    def get(self, submission_id: str) -> Optional[dict]:
        ...

    def delete_by_id(self, submission_id: str) -> bool:
        ...

    def delete_by_email(self, email: str) -> int:
        ...

    def export_by_email(self, email: str) -> list[dict]:
        ...

    def cleanup_expired(self) -> int:
        ...

    def log_admin_access(self, action: str, details: dict) -> None:
        ...


@dataclass
class EncryptedFileStore:
    """
    Whole-file encrypted store.

    Each mutation is a read-decrypt-modify-encrypt-write cycle guarded by a
    process-local lock. Other processes writing the same file race and the
    last writer wins.
    """

    data_dir: Path
    key: bytes
    retention_days: int = 180
    clock: Callable[[], datetime] = utcnow
    _lock: threading.RLock = field(
        default_factory=threading.RLock, init=False, repr=False
    )

    def __post_init__(self):
        self.data_dir = Path(self.data_dir)

    @property
    def submissions_path(self) -> Path:
        return self.data_dir / SUBMISSIONS_FILENAME

    @property
    def audit_log_path(self) -> Path:
        return self.data_dir / AUDIT_LOG_FILENAME

    # -- low level -------------------------------------------------------

    def _ensure_dir(self) -> None:
        self.data_dir.mkdir(parents=True, exist_ok=True)

    def _read(self) -> list[dict]:
        self._ensure_dir()
        try:
            raw = self.submissions_path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return []
        return crypto.decrypt(json.loads(raw), self.key)

    def _write(self, submissions: list[dict]) -> None:
        self._ensure_dir()
        envelope = crypto.encrypt(submissions, self.key)
        fd, tmp_name = tempfile.mkstemp(
            dir=self.data_dir, prefix=".submissions-", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(envelope, handle, indent=2)
            os.replace(tmp_name, self.submissions_path)
        except BaseException:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise

    def _audit(self, action: str, details: dict) -> None:
        entry = {
            "timestamp": format_timestamp(self.clock()),
            "action": action,
            "details": details,
        }
        try:
            self._ensure_dir()
            with self.audit_log_path.open("a", encoding="utf-8") as handle:
                handle.write(json.dumps(entry, ensure_ascii=False) + "\n")
        except OSError:
            logger.exception("Failed to append audit entry %s", action)

    @staticmethod
    def _matches(submission: dict, normalized_email: str) -> bool:
        return (submission.get("email") or "").lower() == normalized_email

    # -- operations -------------------------------------------------------

    def save(self, data: dict) -> str:
        submission_id = str(uuid.uuid4())
        created = self.clock()
        submission = {
            "id": submission_id,
            **data,
            "createdAt": format_timestamp(created),
            "expiresAt": format_timestamp(
                created + timedelta(days=self.retention_days)
            ),
        }
        with self._lock:
            submissions = self._read()
            submissions.append(submission)
            self._write(submissions)

        self._audit(
            "SUBMISSION_CREATED",
            {
                "id": submission_id,
                "company": data.get("company"),
                "email": redact_email(data.get("email", "")),
            },
        )
        return submission_id

    def read_all(self) -> list[dict]:
        submissions = self._read()
        self._audit("DATA_ACCESS", {"action": "read_all"})
        return submissions

    def get(self, submission_id: str) -> Optional[dict]:
        for submission in self.read_all():
            if submission.get("id") == submission_id:
                return submission
        return None

    def delete_by_id(self, submission_id: str) -> bool:
        with self._lock:
            submissions = self._read()
            remaining = [s for s in submissions if s.get("id") != submission_id]
            if len(remaining) == len(submissions):
                return False
            self._write(remaining)

        self._audit(
            "SUBMISSION_DELETED", {"id": submission_id, "reason": "GDPR request"}
        )
        return True

    def delete_by_email(self, email: str) -> int:
        normalized = email.strip().lower()
        with self._lock:
            submissions = self._read()
            remaining = [s for s in submissions if not self._matches(s, normalized)]
            deleted = len(submissions) - len(remaining)
            if deleted:
                self._write(remaining)

        if deleted:
            self._audit(
                "SUBMISSIONS_DELETED_BY_EMAIL",
                {
                    "email": redact_email(normalized),
                    "count": deleted,
                    "reason": "GDPR request",
                },
            )
        return deleted

    def export_by_email(self, email: str) -> list[dict]:
        normalized = email.strip().lower()
        matches = [s for s in self._read() if self._matches(s, normalized)]
        self._audit(
            "DATA_EXPORT",
            {
                "email": redact_email(normalized),
                "count": len(matches),
                "reason": "GDPR portability request",
            },
        )
        exported = []
        for submission in matches:
            item = {name: submission.get(name) for name in EXPORT_FIELDS}
            item["submittedAt"] = submission.get("createdAt")
            exported.append(item)
        return exported

    def cleanup_expired(self) -> int:
        now = self.clock()
        with self._lock:
            submissions = self._read()
            valid = [
                s for s in submissions if parse_timestamp(s["expiresAt"]) > now
            ]
            expired = len(submissions) - len(valid)
            if expired:
                self._write(valid)

        if expired:
            self._audit(
                "DATA_CLEANUP",
                {"expiredCount": expired, "remainingCount": len(valid)},
            )
            logger.info(
                "Removed %d expired submissions (%d-day retention)",
                expired,
                self.retention_days,
            )
        return expired

    def log_admin_access(self, action: str, details: dict) -> None:
        self._audit(f"ADMIN_{action}", details)
