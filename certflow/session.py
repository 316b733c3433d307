"""
The certificate session owns the held certificate and everything derived
from it.

One ``CertificateSession`` replaces a global application store: it is the
only writer of the certificate, the verification report and the
send/share states, and it hands read access to whichever layer needs it
(HTTP API, CLI).  Terminal errors are stored as FAILURE states with their
message; nothing is raised across the session boundary.

Each retrieval or direct certificate load starts a new session sequence
number.  Results that arrive for an older sequence number are discarded
(last write wins).
"""

from __future__ import annotations

import logging
from typing import Any, Optional

import httpx

from .analytics import AnalyticsSink, LoggingAnalyticsSink
from .config import CertflowConfig
from .dispatch import generate_link, send_email
from .engine import RemoteVerificationEngine, VerificationEngine
from .errors import CertflowError, DispatchError, VerificationError
from .fragments import ErrorCategory, error_messages
from .retrieval import retrieve
from .schema import CertificateReference, SessionState, VerificationReport
from .verification import verify_certificate

logger = logging.getLogger(__name__)


class CertificateSession:
    def __init__(
        self,
        config: CertflowConfig | None = None,
        engine: VerificationEngine | None = None,
        client: httpx.AsyncClient | None = None,
        analytics: AnalyticsSink | None = None,
        navigator=None,
    ):
        self.config = config or CertflowConfig()
        self.client = client
        self.engine = engine or RemoteVerificationEngine(
            self.config.verifier_api_url, client=client
        )
        self.analytics = analytics or LoggingAnalyticsSink()
        self._navigator = navigator

        self._sequence = 0
        self.route: Optional[str] = None

        self.certificate: Optional[dict] = None
        self.retrieve_state = SessionState.IDLE
        self.retrieve_error: Optional[str] = None

        self.verification_pending = False
        self.verification_status: Optional[VerificationReport] = None
        self.verification_error: Optional[str] = None
        self.valid: Optional[bool] = None
        self.categories: list[ErrorCategory] = []

        self.email_state = SessionState.IDLE
        self.email_error: Optional[str] = None

        self.share_link: dict = {}
        self.share_link_state = SessionState.IDLE
        self.share_link_error: Optional[str] = None

    # ── sequencing ──────────────────────────────────────────────────────

    @property
    def sequence(self) -> int:
        return self._sequence

    def _next_sequence(self) -> int:
        self._sequence += 1
        return self._sequence

    def _is_stale(self, seq: int) -> bool:
        if seq != self._sequence:
            logger.debug("Discarding result of superseded session %d", seq)
            return True
        return False

    def _navigate(self, route: str, seq: int) -> None:
        if self._is_stale(seq):
            return
        self.route = route
        if self._navigator is not None:
            self._navigator(route)

    # ── read access ─────────────────────────────────────────────────────

    @property
    def verifying(self) -> bool:
        return self.verification_pending or self.retrieve_state == SessionState.PENDING

    def snapshot(self) -> dict[str, Any]:
        """Plain-data view of the session for API responses."""
        return {
            "sequence": self._sequence,
            "route": self.route,
            "certificate": self.certificate,
            "retrieve_state": self.retrieve_state.value,
            "retrieve_error": self.retrieve_error,
            "verifying": self.verifying,
            "verification_error": self.verification_error,
            "valid": self.valid,
            "verification_status": (
                [f.model_dump(mode="json", by_alias=True) for f in self.verification_status]
                if self.verification_status is not None
                else None
            ),
            "errors": [
                {"category": c.value, "title": title, "message": message}
                for c, (title, message) in zip(
                    self.categories, error_messages(self.categories)
                )
            ],
            "email_state": self.email_state.value,
            "email_error": self.email_error,
            "share_link": self.share_link,
            "share_link_state": self.share_link_state.value,
            "share_link_error": self.share_link_error,
        }

    # ── retrieval + verification ────────────────────────────────────────

    async def retrieve_by_action(self, ref: CertificateReference) -> None:
        """Fetch the referenced certificate, then verify it."""
        seq = self._next_sequence()
        self.retrieve_state = SessionState.PENDING
        self.retrieve_error = None
        # A superseded verification never clears its own pending flag
        self.verification_pending = False

        try:
            certificate = await retrieve(ref, client=self.client)
        except CertflowError as e:
            if self._is_stale(seq):
                return
            logger.error("Retrieval of %s failed: %s", ref.uri, e.message)
            self.retrieve_state = SessionState.FAILURE
            self.retrieve_error = e.message
            return

        if self._is_stale(seq):
            return
        self.retrieve_state = SessionState.SUCCESS
        await self._load_and_verify(certificate, seq)

    async def update_certificate(self, certificate: dict) -> None:
        """Hold *certificate* (e.g. a dropped file) and verify it."""
        await self._load_and_verify(certificate, self._next_sequence())

    async def _load_and_verify(self, certificate: dict, seq: int) -> None:
        self.certificate = certificate
        self.verification_status = None
        self.verification_error = None
        self.valid = None
        self.categories = []
        self.email_state = SessionState.IDLE
        self.email_error = None
        self.share_link = {}
        self.share_link_state = SessionState.IDLE
        self.share_link_error = None
        self.route = None

        self.verification_pending = True
        try:
            outcome = await verify_certificate(
                certificate,
                self.engine,
                network=self.config.network_name,
                sink=self.analytics,
                navigate=lambda route: self._navigate(route, seq),
            )
        except VerificationError as e:
            if self._is_stale(seq):
                return
            logger.error("Verification errored: %s", e.message)
            self.verification_pending = False
            self.verification_error = e.message
            return

        if self._is_stale(seq):
            return
        self.verification_pending = False
        self.verification_status = outcome.report
        self.valid = outcome.valid
        self.categories = outcome.categories

    # ── actions ─────────────────────────────────────────────────────────

    async def send_certificate(self, email: str, captcha: str) -> bool:
        """Email the held certificate. Ignored while a send is pending."""
        if self.email_state == SessionState.PENDING:
            logger.debug("Send already pending, ignoring request")
            return False

        self.email_state = SessionState.PENDING
        self.email_error = None
        try:
            if self.certificate is None:
                raise DispatchError("No certificate to send")
            success = await send_email(
                self.certificate,
                email,
                captcha,
                api_url=self.config.email_api_url,
                client=self.client,
            )
            if not success:
                raise DispatchError("Fail to send certificate")
        except (DispatchError, httpx.HTTPError) as e:
            self.email_state = SessionState.FAILURE
            self.email_error = getattr(e, "message", None) or str(e)
            return False

        self.email_state = SessionState.SUCCESS
        return True

    async def generate_share_link(self) -> Optional[dict]:
        """Create a share link for the held certificate."""
        self.share_link = {}
        self.share_link_state = SessionState.PENDING
        self.share_link_error = None
        try:
            if self.certificate is None:
                raise DispatchError("No certificate to share")
            link = await generate_link(
                self.certificate,
                api_url=self.config.share_link_api_url,
                ttl=self.config.share_link_ttl,
                client=self.client,
            )
            if not link:
                raise DispatchError("Fail to generate certificate share link")
        except (DispatchError, httpx.HTTPError, ValueError) as e:
            self.share_link_state = SessionState.FAILURE
            self.share_link_error = getattr(e, "message", None) or str(e)
            return None

        self.share_link = link
        self.share_link_state = SessionState.SUCCESS
        return link
