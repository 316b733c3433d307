"""
Certflow data model — Pydantic v2 models.

  CertificateReference → (retrieve) → Certificate (plain dict)
  Certificate → (engine) → VerificationReport = list[Fragment]

Fragments use the engine's wire names (``codeString`` etc.) through
aliases so that reports can be validated straight from JSON.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class CheckType(str, Enum):
    DOCUMENT_INTEGRITY = "DOCUMENT_INTEGRITY"
    DOCUMENT_STATUS = "DOCUMENT_STATUS"
    ISSUER_IDENTITY = "ISSUER_IDENTITY"


class FragmentStatus(str, Enum):
    VALID = "VALID"
    INVALID = "INVALID"
    ERROR = "ERROR"
    SKIPPED = "SKIPPED"


class SessionState(str, Enum):
    IDLE = "IDLE"
    PENDING = "PENDING"
    SUCCESS = "SUCCESS"
    FAILURE = "FAILURE"


# ---------------------------------------------------------------------------
# References & reports
# ---------------------------------------------------------------------------

class CertificateReference(BaseModel):
    """Where to fetch a certificate from, plus an optional decryption key."""
    model_config = ConfigDict(frozen=True)

    uri: str = Field(..., min_length=1)
    key: Optional[str] = None


class FragmentReason(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    code: Optional[int] = None
    code_string: str = Field(default="", alias="codeString")
    message: str = ""


class Fragment(BaseModel):
    """One named check's result within a verification report."""
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    name: str
    type: str  # CheckType value
    status: FragmentStatus
    data: Any = None
    reason: Optional[FragmentReason] = None


VerificationReport = list[Fragment]


def parse_report(raw: list[dict]) -> VerificationReport:
    """Validate a JSON fragment list into a report."""
    return [Fragment.model_validate(item) for item in raw]
