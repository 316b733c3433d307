"""
Analytics events for failed verifications.

Emission is best-effort: if the issuer store address or the document id
cannot be derived from the certificate, the event is skipped and the
failure is only logged.
"""

from __future__ import annotations

import logging
from enum import IntEnum
from typing import Optional, Protocol

from pydantic import BaseModel

from .document import get_document_id, get_issuer_addresses

logger = logging.getLogger(__name__)

CERTIFICATE_ERROR_CATEGORY = "CERTIFICATE_ERROR"


class AnalyticsErrorCode(IntEnum):
    ISSUER_IDENTITY = 0
    CERTIFICATE_HASH = 1
    UNISSUED_CERTIFICATE = 2
    REVOKED_CERTIFICATE = 3
    CERTIFICATE_STORE = 4


class AnalyticsEvent(BaseModel):
    category: str
    action: str
    label: str
    value: int


class AnalyticsSink(Protocol):
    def send(self, event: AnalyticsEvent) -> None: ...


class LoggingAnalyticsSink:
    """Writes events to the log; the default when no tracker is wired in."""

    def send(self, event: AnalyticsEvent) -> None:
        logger.info(
            "analytics %s action=%s label=%s value=%d",
            event.category, event.action, event.label, event.value,
        )


class RecordingAnalyticsSink:
    """Keeps events in memory."""

    def __init__(self):
        self.events: list[AnalyticsEvent] = []

    def send(self, event: AnalyticsEvent) -> None:
        self.events.append(event)


def get_analytics_details(certificate: dict) -> tuple[Optional[str], Optional[str]]:
    """Return (store addresses joined by ',', document id) or (None, None)."""
    try:
        store_addresses = ",".join(get_issuer_addresses(certificate))
        doc_id = get_document_id(certificate)
    except Exception as e:
        logger.error("Unable to read analytics details: %s", e)
        return None, None
    return store_addresses, (str(doc_id) if doc_id else None)


def trigger_analytics(
    sink: AnalyticsSink, certificate: dict, code: AnalyticsErrorCode
) -> bool:
    """Send one CERTIFICATE_ERROR event. Returns True if it was emitted."""
    store_addresses, doc_id = get_analytics_details(certificate)
    if not (store_addresses and doc_id):
        return False
    event = AnalyticsEvent(
        category=CERTIFICATE_ERROR_CATEGORY,
        action=store_addresses,
        label=doc_id,
        value=int(code),
    )
    try:
        sink.send(event)
    except Exception as e:
        logger.error("Analytics sink failed: %s", e)
        return False
    return True
