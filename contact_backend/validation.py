"""
Validation and sanitisation of contact form submissions.
"""

from __future__ import annotations

import html
from datetime import datetime
from typing import Optional

from email_validator import EmailNotValidError, validate_email
from pydantic import AnyHttpUrl, TypeAdapter, ValidationError

from contact_backend.schemas import ContactRequest

ALLOWED_INTERESTS = (
    "3d-modell",
    "ar-optimiert",
    "renderings",
    "animation",
    "other",
)
ALLOWED_BUDGETS = ("<500", "500-1000", ">1000", "")

# html.escape covers & < > " '; these close the gap to the usual HTML-entity
# escaping of form input.
_EXTRA_ESCAPES = str.maketrans({"/": "&#x2F;", "\\": "&#x5C;", "`": "&#96;"})

_http_url = TypeAdapter(AnyHttpUrl)


def _blank(value: str | None) -> bool:
    return value is None or value.strip() == ""


def sanitize_string(value: str | None) -> str:
    if not isinstance(value, str):
        return ""
    return html.escape(value.strip(), quote=True).translate(_EXTRA_ESCAPES)


def is_valid_email(email: str) -> bool:
    try:
        validate_email(email, check_deliverability=False, allow_smtputf8=False)
    except EmailNotValidError:
        return False
    return True


def normalize_url(url: str) -> Optional[str]:
    """
    Parse an http(s) URL and return its normalised form, or None when the
    URL is malformed or its host has empty labels.
    """
    try:
        parsed = _http_url.validate_python(url.strip())
    except ValidationError:
        return None
    host = parsed.host or ""
    if host != "localhost" and ("." not in host or not all(host.split("."))):
        return None
    return str(parsed)


def is_valid_url(url: str | None) -> bool:
    if _blank(url):
        return True
    return normalize_url(url) is not None


def is_valid_date(value: str | None) -> bool:
    if _blank(value):
        return True
    try:
        datetime.strptime(value.strip(), "%Y-%m-%d")
    except ValueError:
        return False
    return True


def collect_errors(payload: ContactRequest) -> list[str]:
    """Return every user-facing validation error, in form order."""
    errors: list[str] = []

    if _blank(payload.company):
        errors.append("Company name is required")

    if _blank(payload.email):
        errors.append("Email address is required")
    elif not is_valid_email(payload.email.strip()):
        errors.append("Please enter a valid email address")

    if not payload.interests:
        errors.append("Please select at least one interest")
    elif any(i not in ALLOWED_INTERESTS for i in payload.interests):
        errors.append("Invalid interest selection")

    if _blank(payload.message):
        errors.append("A project description is required")

    if payload.consent is not True:
        errors.append("Please accept the privacy policy")

    if not is_valid_url(payload.website):
        errors.append("Please enter a valid website URL")

    if payload.budget and payload.budget not in ALLOWED_BUDGETS:
        errors.append("Invalid budget selection")

    if not is_valid_date(payload.deadline):
        errors.append("Please enter a valid date")

    return errors


def sanitize(payload: ContactRequest, *, ip_hash: str, timestamp: str) -> dict:
    """Build the stored record from an already validated payload."""
    interests = [i for i in payload.interests or [] if i in ALLOWED_INTERESTS]
    return {
        "name": sanitize_string(payload.name),
        "company": sanitize_string(payload.company),
        "email": payload.email.strip().lower(),
        "interests": interests,
        "interestOther": (
            sanitize_string(payload.interestOther) if "other" in interests else ""
        ),
        "website": (
            "" if _blank(payload.website) else normalize_url(payload.website)
        ),
        "budget": payload.budget if payload.budget in ALLOWED_BUDGETS else "",
        "deadline": (payload.deadline or "").strip(),
        "message": sanitize_string(payload.message),
        "consent": True,
        "consentTimestamp": timestamp,
        "submittedAt": timestamp,
        "ipHash": ip_hash,
    }
