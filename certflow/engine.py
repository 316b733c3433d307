"""
Verification engine interface.

The engine performs the cryptographic checks (signature, merkle proof,
issuance and revocation lookups) and reports them as fragments.  Certflow
only consumes the report; ``RemoteVerificationEngine`` delegates the work
to an HTTP verifier service.
"""

from __future__ import annotations

import logging
from typing import Optional, Protocol, Sequence

import httpx

from .fragments import is_valid
from .http import JSON_HEADERS, open_client
from .schema import Fragment, VerificationReport, parse_report

logger = logging.getLogger(__name__)


class VerificationEngine(Protocol):
    async def verify(self, certificate: dict, network: str) -> VerificationReport: ...

    def is_valid(
        self,
        fragments: Sequence[Optional[Fragment]],
        check_names: Optional[Sequence[str]] = None,
    ) -> bool: ...


class RemoteVerificationEngine:
    """POSTs ``{document, network}`` to a verifier endpoint."""

    def __init__(self, api_url: str, client: httpx.AsyncClient | None = None):
        self.api_url = api_url
        self._client = client

    async def verify(self, certificate: dict, network: str) -> VerificationReport:
        logger.debug("Verifying certificate on %s via %s", network, self.api_url)
        async with open_client(self._client) as client:
            response = await client.post(
                self.api_url,
                json={"document": certificate, "network": network},
                headers=JSON_HEADERS,
            )
        response.raise_for_status()

        payload = response.json()
        # Some verifier deployments wrap the fragments with a summary
        if isinstance(payload, dict):
            payload = payload.get("data")
        if not isinstance(payload, list):
            raise ValueError("Verifier returned no fragments")
        return parse_report(payload)

    def is_valid(
        self,
        fragments: Sequence[Optional[Fragment]],
        check_names: Optional[Sequence[str]] = None,
    ) -> bool:
        return is_valid(fragments, check_names)
