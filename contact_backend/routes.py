"""
Public HTTP routes: the contact form endpoint and the health check.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Request

from contact_backend.config import Settings, get_settings
from contact_backend.dependencies import get_mailer, get_submission_store
from contact_backend.mailer import Mailer
from contact_backend.schemas import ContactRequest, HealthResponse, StatusResponse
from contact_backend.security import hash_ip
from contact_backend.store import SubmissionStore, format_timestamp, utcnow
from contact_backend.validation import collect_errors, sanitize

logger = logging.getLogger(__name__)

router = APIRouter()


def client_ip(request: Request) -> str:
    return request.client.host if request.client else "unknown"


@router.post("/contact", response_model=StatusResponse)
def submit_contact(
    payload: ContactRequest,
    request: Request,
    store: SubmissionStore = Depends(get_submission_store),
    mailer: Mailer = Depends(get_mailer),
    settings: Settings = Depends(get_settings),
):
    """
    Validate, store and announce a contact form submission.
    """
    errors = collect_errors(payload)
    if errors:
        raise HTTPException(status_code=400, detail=". ".join(errors))

    submission = sanitize(
        payload,
        ip_hash=hash_ip(client_ip(request), settings.ip_hash_salt),
        timestamp=format_timestamp(utcnow()),
    )
    submission_id = store.save(submission)

    # Mail problems must not fail a request whose data is already stored.
    try:
        mailer.send_notification(submission, submission_id)
    except Exception as exc:
        logger.error("Notification email failed: %s", exc)

    if settings.send_auto_response:
        try:
            mailer.send_auto_response(submission)
        except Exception as exc:
            logger.error("Auto-response email failed: %s", exc)

    return StatusResponse(
        success=True,
        message="Your inquiry was submitted successfully. We will get back to you soon.",
    )


@router.get("/health", response_model=HealthResponse)
def health():
    return HealthResponse(status="ok", timestamp=format_timestamp(utcnow()))
