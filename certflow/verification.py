"""
Verification stage: engine call → classification → routing + analytics.

Steps run strictly in sequence:

  1. submit the certificate to the verification engine
  2. classify the report into error categories
  3. valid   → navigate to the viewer
     invalid → emit one analytics event per failing condition
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Callable, Optional

from .analytics import AnalyticsErrorCode, AnalyticsSink, trigger_analytics
from .engine import VerificationEngine
from .errors import VerificationError
from .fragments import (
    ErrorCategory,
    certificate_not_issued,
    classify,
    get_all_but_revoke_fragment,
    get_revoke_fragment,
)
from .schema import CheckType, VerificationReport

logger = logging.getLogger(__name__)

Navigator = Callable[[str], None]

VIEWER_ROUTE = "/viewer"

# Identity failures share the UNISSUED_CERTIFICATE code; ISSUER_IDENTITY is
# defined but never emitted.
IDENTITY_FAILURE_CODE = AnalyticsErrorCode.UNISSUED_CERTIFICATE


@dataclass
class VerificationOutcome:
    """Result of one verification pass."""
    report: VerificationReport
    valid: bool
    categories: list[ErrorCategory] = field(default_factory=list)
    analytics_codes: list[AnalyticsErrorCode] = field(default_factory=list)


def analytics_codes_for(
    report: VerificationReport, engine: VerificationEngine
) -> list[AnalyticsErrorCode]:
    """Return every analytics code that applies to an invalid report.

    The conditions are independent; several may fire for one report.
    """
    without_revoke = get_all_but_revoke_fragment(report)
    revoke_only = [get_revoke_fragment(report)]
    status_failed = not engine.is_valid(without_revoke, [CheckType.DOCUMENT_STATUS])
    not_issued = certificate_not_issued(report)

    codes: list[AnalyticsErrorCode] = []
    if not engine.is_valid(report, [CheckType.DOCUMENT_INTEGRITY]):
        codes.append(AnalyticsErrorCode.CERTIFICATE_HASH)
    if status_failed and not_issued:
        codes.append(AnalyticsErrorCode.UNISSUED_CERTIFICATE)
    if status_failed and not not_issued:
        codes.append(AnalyticsErrorCode.CERTIFICATE_STORE)
    if not engine.is_valid(revoke_only, [CheckType.DOCUMENT_STATUS]):
        codes.append(AnalyticsErrorCode.REVOKED_CERTIFICATE)
    if not engine.is_valid(report, [CheckType.ISSUER_IDENTITY]):
        codes.append(IDENTITY_FAILURE_CODE)
    return codes


async def verify_certificate(
    certificate: dict,
    engine: VerificationEngine,
    network: str,
    sink: Optional[AnalyticsSink] = None,
    navigate: Optional[Navigator] = None,
) -> VerificationOutcome:
    """Verify *certificate* and run the success/failure side effects.

    Raises VerificationError when the engine call itself fails.
    """
    if certificate is None:
        raise VerificationError("No certificate to verify")

    try:
        report = await engine.verify(certificate, network=network)
    except Exception as e:
        raise VerificationError(str(e) or type(e).__name__) from e

    logger.debug(
        "Verification Status: %s",
        json.dumps([f.model_dump(mode="json", by_alias=True) for f in report]),
    )

    valid, categories = classify(report, engine.is_valid)
    outcome = VerificationOutcome(report=report, valid=valid, categories=categories)

    if valid:
        if navigate is not None:
            navigate(VIEWER_ROUTE)
        return outcome

    outcome.analytics_codes = analytics_codes_for(report, engine)
    if sink is not None:
        for code in outcome.analytics_codes:
            trigger_analytics(sink, certificate, code)
    return outcome
