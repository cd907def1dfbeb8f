"""
Email notifications for new contact submissions.

``SmtpMailer`` talks to a real SMTP server; ``InMemoryMailer`` records
messages for tests and local runs.
"""

from __future__ import annotations

import logging
import smtplib
from dataclasses import dataclass, field
from datetime import datetime, timezone
from email.message import EmailMessage
from typing import Optional, Protocol
from zoneinfo import ZoneInfo

from contact_backend.config import Settings
from contact_backend.security import short_id

logger = logging.getLogger(__name__)

INTEREST_LABELS = {
    "3d-modell": "Create a 3D model",
    "ar-optimiert": "AR-optimised 3D model",
    "renderings": "Simple product renderings",
    "animation": "3D animation",
    "other": "Something else",
}

BUDGET_LABELS = {
    "<500": "Under 500 EUR",
    "500-1000": "500 EUR - 1,000 EUR",
    ">1000": "Over 1,000 EUR",
}


def format_interests(interests: list[str], interest_other: str = "") -> str:
    formatted = ", ".join(INTEREST_LABELS.get(i, i) for i in interests)
    if "other" in interests and interest_other:
        return f"{formatted}\n   -> Details: {interest_other}"
    return formatted


def format_budget(budget: str) -> str:
    return BUDGET_LABELS.get(budget, "Not specified")


class Mailer(Protocol):
    """Outbound mail operations used by the contact route."""

    def send_notification(self, submission: dict, submission_id: str) -> None:
        ...

    def send_auto_response(self, submission: dict) -> None:
        ...


def build_notification(
    settings: Settings, submission: dict, submission_id: str, now: datetime
) -> EmailMessage:
    display_id = short_id(submission_id)
    received = now.astimezone(ZoneInfo(settings.timezone)).strftime("%d.%m.%Y, %H:%M")
    message = EmailMessage()
    message["From"] = f'"Website Contact Form" <{settings.sender_address}>'
    message["To"] = settings.notification_email
    message["Reply-To"] = submission.get("email", "")
    message["Subject"] = f"New project inquiry - ID: {display_id}"
    # Details stay in the encrypted store; the mail only announces the inquiry.
    message.set_content(
        "New project inquiry\n"
        "===================\n\n"
        f"Inquiry ID: {display_id}\n"
        f"Received: {received}\n\n"
        "---\n"
        "Full details are available in the admin panel.\n\n"
        "This email was generated automatically.\n"
    )
    return message


def build_auto_response(settings: Settings, submission: dict) -> EmailMessage:
    message = EmailMessage()
    message["From"] = f"<{settings.sender_address}>"
    message["To"] = submission["email"]
    message["Subject"] = "We have received your inquiry"
    message.set_content(
        f"Hello {submission.get('name') or 'there'},\n\n"
        "thank you for your inquiry. We received your message and will get "
        "back to you shortly.\n\n"
        "Your inquiry at a glance:\n"
        "-------------------------\n"
        f"Company: {submission.get('company', '')}\n"
        f"Interests: {format_interests(submission.get('interests', []), submission.get('interestOther', ''))}\n"
        f"Budget: {format_budget(submission.get('budget', ''))}\n"
        f"Requested deadline: {submission.get('deadline') or 'Not specified'}\n\n"
        "Note: this email was generated automatically. Your data is handled "
        "according to our privacy policy and deleted after the retention "
        "period.\n"
    )
    return message


@dataclass
class SmtpMailer:
    settings: Settings
    timeout: float = 30.0

    def _deliver(self, message: EmailMessage) -> None:
        s = self.settings
        if s.smtp_secure:
            client: smtplib.SMTP = smtplib.SMTP_SSL(
                s.smtp_host, s.smtp_port, timeout=self.timeout
            )
        else:
            client = smtplib.SMTP(s.smtp_host, s.smtp_port, timeout=self.timeout)
        with client:
            if not s.smtp_secure:
                client.starttls()
            client.login(s.smtp_user, s.smtp_pass)
            client.send_message(message)

    def send_notification(self, submission: dict, submission_id: str) -> None:
        if not self.settings.smtp_configured:
            logger.info("Notification email skipped (SMTP not configured)")
            return
        message = build_notification(
            self.settings, submission, submission_id, datetime.now(timezone.utc)
        )
        self._deliver(message)
        logger.info(
            "Notification email sent to %s (ID: %s)",
            self.settings.notification_email,
            short_id(submission_id),
        )

    def send_auto_response(self, submission: dict) -> None:
        if not self.settings.smtp_configured:
            logger.info("Auto-response email skipped (SMTP not configured)")
            return
        self._deliver(build_auto_response(self.settings, submission))
        logger.info("Auto-response email sent")


@dataclass
class InMemoryMailer:
    """Test double that keeps every message it is asked to send."""

    settings: Optional[Settings] = None
    outbox: list[EmailMessage] = field(default_factory=list)
    fail_with: Optional[Exception] = None

    def __post_init__(self):
        if self.settings is None:
            self.settings = Settings()

    def send_notification(self, submission: dict, submission_id: str) -> None:
        if self.fail_with:
            raise self.fail_with
        self.outbox.append(
            build_notification(
                self.settings, submission, submission_id, datetime.now(timezone.utc)
            )
        )

    def send_auto_response(self, submission: dict) -> None:
        if self.fail_with:
            raise self.fail_with
        self.outbox.append(build_auto_response(self.settings, submission))
