"""Request/response models for the certflow API."""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# POST /certificates/retrieve, /certificates/verify
# ---------------------------------------------------------------------------

class RetrieveRequest(BaseModel):
    uri: str = Field(..., min_length=1, max_length=2000)
    key: Optional[str] = None


class VerifyRequest(BaseModel):
    certificate: dict


class CategoryError(BaseModel):
    category: str
    title: str
    message: str


class SessionResponse(BaseModel):
    sequence: int
    route: Optional[str] = None
    certificate: Optional[dict] = None
    retrieve_state: str
    retrieve_error: Optional[str] = None
    verifying: bool
    verification_error: Optional[str] = None
    valid: Optional[bool] = None
    verification_status: Optional[list[dict]] = None
    errors: list[CategoryError] = Field(default_factory=list)
    email_state: str
    email_error: Optional[str] = None
    share_link: Any = Field(default_factory=dict)
    share_link_state: str
    share_link_error: Optional[str] = None


# ---------------------------------------------------------------------------
# POST /certificates/send, /certificates/share
# ---------------------------------------------------------------------------

class SendRequest(BaseModel):
    email: str = Field(..., min_length=3, max_length=320)
    captcha: str = Field(..., min_length=1)


class SendResponse(BaseModel):
    email_state: str
    email_error: Optional[str] = None


class ShareResponse(BaseModel):
    share_link_state: str
    share_link: Any = None
    share_link_error: Optional[str] = None
