"""
Pydantic schemas for the contact backend API.
"""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, StrictBool


class ContactRequest(BaseModel):
    """Raw contact form body; field rules live in ``validation``."""

    model_config = ConfigDict(extra="ignore")

    name: Optional[str] = Field(None, max_length=200)
    company: Optional[str] = Field(None, max_length=200)
    email: Optional[str] = Field(None, max_length=254)
    interests: Optional[list[str]] = None
    interestOther: Optional[str] = Field(None, max_length=500)
    website: Optional[str] = Field(None, max_length=500)
    budget: Optional[str] = None
    deadline: Optional[str] = None
    message: Optional[str] = Field(None, max_length=5000)
    consent: Optional[StrictBool] = None


class StatusResponse(BaseModel):
    success: bool
    message: str


class HealthResponse(BaseModel):
    status: Literal["ok"]
    timestamp: str


class LoginRequest(BaseModel):
    password: Optional[str] = None


class LoginResponse(BaseModel):
    success: bool
    token: str
    message: str


class SubmissionListItem(BaseModel):
    id: str
    shortId: str
    company: Optional[str] = None
    createdAt: str


class SubmissionListResponse(BaseModel):
    success: bool
    submissions: list[SubmissionListItem]


class SubmissionDetailResponse(BaseModel):
    success: bool
    submission: dict


class DataRequest(BaseModel):
    email: str = Field(..., min_length=3, max_length=254)


class DataExportResponse(BaseModel):
    success: bool
    count: int
    submissions: list[dict]


class DataErasureResponse(BaseModel):
    success: bool
    count: int
