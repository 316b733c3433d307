"""
Fragment classification: maps a verification report to error categories.

The report is partitioned around the revocation fragment:

  - all fragments
  - the revocation-only fragment (status check of the revocation mechanism)
  - every fragment except the revocation one

Failing checks are reported in a fixed order (HASH, ISSUED, REVOKED,
IDENTITY).  A failed status check on an invalid issuer store address
replaces them all with the single ADDRESS_INVALID category.
"""

from __future__ import annotations

from enum import Enum, IntEnum
from typing import Callable, Optional, Sequence

from .schema import CheckType, Fragment, FragmentStatus

ALL_CHECKS = (
    CheckType.DOCUMENT_INTEGRITY,
    CheckType.DOCUMENT_STATUS,
    CheckType.ISSUER_IDENTITY,
)

ISSUED_FRAGMENT_NAME = "OpenAttestationEthereumDocumentStoreIssued"
REVOKED_FRAGMENT_NAME = "OpenAttestationEthereumDocumentStoreRevoked"


class StatusReasonCode(IntEnum):
    """Reason codes reported by the document-store status fragments."""
    UNEXPECTED_ERROR = 0
    DOCUMENT_NOT_ISSUED = 1
    CONTRACT_ADDRESS_INVALID = 2
    ETHERS_UNHANDLED_ERROR = 3
    SKIPPED = 4
    DOCUMENT_REVOKED = 5


class ErrorCategory(str, Enum):
    HASH = "HASH"
    ISSUED = "ISSUED"
    REVOKED = "REVOKED"
    IDENTITY = "IDENTITY"
    ADDRESS_INVALID = "ADDRESS_INVALID"


# category → (failure title, failure message)
ERROR_MESSAGES: dict[ErrorCategory, tuple[str, str]] = {
    ErrorCategory.HASH: (
        "Certificate has been tampered with",
        "The contents of this certificate are inaccurate and have been "
        "tampered with.",
    ),
    ErrorCategory.ISSUED: (
        "Certificate not issued",
        "This certificate cannot be found. Please contact your issuing "
        "institution for help or issue the certificate before trying again.",
    ),
    ErrorCategory.REVOKED: (
        "Certificate has been revoked",
        "This certificate has been revoked by your issuing institution. "
        "Please contact your issuing institution for more details.",
    ),
    ErrorCategory.IDENTITY: (
        "Certificate from unregistered institution",
        "We could not verify the identity of the issuing institution. "
        "Please contact the institution that issued this certificate.",
    ),
    ErrorCategory.ADDRESS_INVALID: (
        "Certificate store address is invalid",
        "Please inform the issuer of this certificate that the certificate "
        "store address is invalid.",
    ),
}

IsValid = Callable[[Sequence[Optional[Fragment]], Optional[Sequence[str]]], bool]


# ---------------------------------------------------------------------------
# Validity predicate
# ---------------------------------------------------------------------------

def is_valid(
    fragments: Sequence[Optional[Fragment]],
    check_names: Optional[Sequence[str]] = None,
) -> bool:
    """Return True if every requested check passes across *fragments*.

    A check passes when at least one fragment of that type is VALID and
    none is INVALID or ERROR.  ``None`` entries (a missing fragment) are
    ignored, so a check with no fragment at all fails.
    """
    checks = list(check_names) if check_names is not None else list(ALL_CHECKS)
    present = [f for f in fragments if f is not None]
    for check in checks:
        of_type = [f for f in present if f.type == check]
        if not of_type:
            return False
        if any(f.status not in (FragmentStatus.VALID, FragmentStatus.SKIPPED) for f in of_type):
            return False
        if not any(f.status == FragmentStatus.VALID for f in of_type):
            return False
    return True


# ---------------------------------------------------------------------------
# Partitioning & reason signals
# ---------------------------------------------------------------------------

def get_revoke_fragment(fragments: Sequence[Fragment]) -> Optional[Fragment]:
    return next((f for f in fragments if f.name == REVOKED_FRAGMENT_NAME), None)


def get_all_but_revoke_fragment(fragments: Sequence[Fragment]) -> list[Fragment]:
    return [f for f in fragments if f.name != REVOKED_FRAGMENT_NAME]


def _issued_reason_code(fragments: Sequence[Fragment]) -> Optional[int]:
    issued = next((f for f in fragments if f.name == ISSUED_FRAGMENT_NAME), None)
    if issued is None or issued.reason is None:
        return None
    return issued.reason.code


def certificate_not_issued(fragments: Sequence[Fragment]) -> bool:
    return _issued_reason_code(fragments) == StatusReasonCode.DOCUMENT_NOT_ISSUED


def address_invalid(fragments: Sequence[Fragment]) -> bool:
    return _issued_reason_code(fragments) == StatusReasonCode.CONTRACT_ADDRESS_INVALID


# ---------------------------------------------------------------------------
# Classification
# ---------------------------------------------------------------------------

def classify(
    fragments: Sequence[Fragment],
    is_valid: IsValid = is_valid,
) -> tuple[bool, list[ErrorCategory]]:
    """Return (overall validity, error categories in display order)."""
    if is_valid(fragments, None):
        return True, []

    without_revoke = get_all_but_revoke_fragment(fragments)
    revoke_only = [get_revoke_fragment(fragments)]

    categories: list[ErrorCategory] = []
    if not is_valid(fragments, [CheckType.DOCUMENT_INTEGRITY]):
        categories.append(ErrorCategory.HASH)
    status_failed = not is_valid(without_revoke, [CheckType.DOCUMENT_STATUS])
    if status_failed:
        categories.append(ErrorCategory.ISSUED)
    if not is_valid(revoke_only, [CheckType.DOCUMENT_STATUS]):
        categories.append(ErrorCategory.REVOKED)
    if not is_valid(fragments, [CheckType.ISSUER_IDENTITY]):
        categories.append(ErrorCategory.IDENTITY)

    if status_failed and address_invalid(fragments):
        categories = [ErrorCategory.ADDRESS_INVALID]

    return False, categories


def error_messages(categories: Sequence[ErrorCategory]) -> list[tuple[str, str]]:
    return [ERROR_MESSAGES[c] for c in categories]
