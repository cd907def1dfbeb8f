"""
Token-protected admin routes for reviewing and erasing submissions.
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Header, HTTPException, Request

from contact_backend.config import Settings, get_settings
from contact_backend.dependencies import get_session_store, get_submission_store
from contact_backend.routes import client_ip
from contact_backend.schemas import (
    DataErasureResponse,
    DataExportResponse,
    DataRequest,
    LoginRequest,
    LoginResponse,
    StatusResponse,
    SubmissionDetailResponse,
    SubmissionListItem,
    SubmissionListResponse,
)
from contact_backend.security import hash_ip, short_id, verify_password
from contact_backend.sessions import SessionStatus, SessionStore
from contact_backend.store import SubmissionStore

logger = logging.getLogger(__name__)

router = APIRouter()

BEARER_PREFIX = "Bearer "


def _bearer_token(authorization: Optional[str]) -> str:
    if not authorization or not authorization.startswith(BEARER_PREFIX):
        raise HTTPException(status_code=401, detail="Authentication required")
    return authorization[len(BEARER_PREFIX):]


def require_admin(
    authorization: Optional[str] = Header(None),
    sessions: SessionStore = Depends(get_session_store),
) -> str:
    """Resolve the bearer token or reject the request with 401."""
    token = _bearer_token(authorization)
    status = sessions.check(token)
    if status is SessionStatus.EXPIRED:
        raise HTTPException(
            status_code=401, detail="Session expired. Please log in again."
        )
    if status is not SessionStatus.VALID:
        raise HTTPException(status_code=401, detail="Invalid token")
    return token


@router.post("/login", response_model=LoginResponse)
def login(
    payload: LoginRequest,
    request: Request,
    store: SubmissionStore = Depends(get_submission_store),
    sessions: SessionStore = Depends(get_session_store),
    settings: Settings = Depends(get_settings),
):
    if not payload.password:
        raise HTTPException(status_code=400, detail="Password required")

    ip_hash = hash_ip(client_ip(request), settings.token_secret)
    if not verify_password(
        payload.password, settings.admin_password, settings.token_secret
    ):
        if not settings.admin_password:
            logger.warning("ADMIN_PASSWORD is not set; admin login is disabled")
        store.log_admin_access("LOGIN_FAILED", {"ipHash": ip_hash})
        raise HTTPException(status_code=401, detail="Wrong password")

    token = sessions.create()
    store.log_admin_access("LOGIN_SUCCESS", {"ipHash": ip_hash})
    return LoginResponse(success=True, token=token, message="Logged in")


@router.post("/logout", response_model=StatusResponse)
def logout(
    token: str = Depends(require_admin),
    sessions: SessionStore = Depends(get_session_store),
):
    sessions.revoke(token)
    return StatusResponse(success=True, message="Logged out")


@router.get("/verify", response_model=StatusResponse)
def verify(token: str = Depends(require_admin)):
    return StatusResponse(success=True, message="Token valid")


@router.get("/submissions", response_model=SubmissionListResponse)
def list_submissions(
    token: str = Depends(require_admin),
    store: SubmissionStore = Depends(get_submission_store),
):
    items = [
        SubmissionListItem(
            id=sub["id"],
            shortId=short_id(sub["id"]),
            company=sub.get("company"),
            createdAt=sub["createdAt"],
        )
        for sub in store.read_all()
    ]
    # ISO-8601 UTC strings sort chronologically.
    items.sort(key=lambda item: item.createdAt, reverse=True)
    store.log_admin_access("LIST_SUBMISSIONS", {"count": len(items)})
    return SubmissionListResponse(success=True, submissions=items)


@router.get("/submissions/{submission_id}", response_model=SubmissionDetailResponse)
def get_submission(
    submission_id: str,
    token: str = Depends(require_admin),
    store: SubmissionStore = Depends(get_submission_store),
):
    submission = store.get(submission_id)
    if not submission:
        raise HTTPException(status_code=404, detail="Submission not found")
    store.log_admin_access("VIEW_SUBMISSION", {"submissionId": submission_id})
    return SubmissionDetailResponse(
        success=True,
        submission={**submission, "shortId": short_id(submission["id"])},
    )


@router.delete("/submissions/{submission_id}", response_model=StatusResponse)
def delete_submission(
    submission_id: str,
    token: str = Depends(require_admin),
    store: SubmissionStore = Depends(get_submission_store),
):
    if not store.delete_by_id(submission_id):
        raise HTTPException(status_code=404, detail="Submission not found")
    return StatusResponse(success=True, message="Submission deleted")


@router.post("/data-requests/export", response_model=DataExportResponse)
def export_data(
    payload: DataRequest,
    token: str = Depends(require_admin),
    store: SubmissionStore = Depends(get_submission_store),
):
    """
    Data-portability request: every submission for an email address, without
    internal fields.
    """
    exported = store.export_by_email(payload.email)
    return DataExportResponse(success=True, count=len(exported), submissions=exported)


@router.post("/data-requests/erase", response_model=DataErasureResponse)
def erase_data(
    payload: DataRequest,
    token: str = Depends(require_admin),
    store: SubmissionStore = Depends(get_submission_store),
):
    deleted = store.delete_by_email(payload.email)
    return DataErasureResponse(success=True, count=deleted)
