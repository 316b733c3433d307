"""Shared fixtures: fragment reports, a scripted engine, wrapped certificates."""

from __future__ import annotations

import asyncio
import copy
from typing import Optional

import pytest

from certflow.fragments import (
    ISSUED_FRAGMENT_NAME,
    REVOKED_FRAGMENT_NAME,
    is_valid,
)
from certflow.schema import Fragment, FragmentReason


def build_report(
    hash: str = "VALID",
    issued: str = "VALID",
    revoked: str = "VALID",
    identity: str = "VALID",
    issued_code: Optional[int] = None,
) -> list[Fragment]:
    issued_reason = None
    if issued_code is not None:
        issued_reason = FragmentReason(code=issued_code, codeString="", message="")
    return [
        Fragment(name="OpenAttestationHash", type="DOCUMENT_INTEGRITY", status=hash),
        Fragment(
            name=ISSUED_FRAGMENT_NAME,
            type="DOCUMENT_STATUS",
            status=issued,
            reason=issued_reason,
        ),
        Fragment(name=REVOKED_FRAGMENT_NAME, type="DOCUMENT_STATUS", status=revoked),
        Fragment(name="OpencertsRegistryVerifier", type="ISSUER_IDENTITY", status=identity),
    ]


class ScriptedEngine:
    """Verification engine returning a fixed report (or raising)."""

    def __init__(self, report=None, error: Exception | None = None):
        self.report = report if report is not None else build_report()
        self.error = error
        self.calls: list[tuple[dict, str]] = []
        self.gates: dict[str, asyncio.Event] = {}
        self.reports_by_id: dict[str, list[Fragment]] = {}

    async def verify(self, certificate, network):
        self.calls.append((certificate, network))
        gate = self.gates.get(certificate.get("name", ""))
        if gate is not None:
            await gate.wait()
        if self.error is not None:
            raise self.error
        report = self.reports_by_id.get(certificate.get("name", ""), self.report)
        return copy.deepcopy(report)

    def is_valid(self, fragments, check_names=None):
        return is_valid(fragments, check_names)


WRAPPED_CERTIFICATE = {
    "version": "open-attestation/2.0",
    "data": {
        "id": "5b0a6f5e-a3c9-4c1f-9a47-4c4d2d0b4a11:string:cert-001",
        "name": "8c5c2e1a-6a3f-4b7f-9a36-2ce1b6d7f0e2:string:Master of Science",
        "issuers": [
            {
                "name": "4d6e0e43-3d2a-4a08-9d1f-6e1c6b3c1b22:string:Demo University",
                "documentStore": "a1d9e4c2-0b7f-4c55-8e6f-4a1b2c3d4e5f:string:0x007d40224f6562461633ccfbaffd359ebb2fc9ba",
            }
        ],
    },
    "signature": {
        "type": "SHA3MerkleProof",
        "targetHash": "f7432b3219b2aa4122e289f44901830fa32f224ee9dfce28565677f1d279b2c7",
        "proof": [],
        "merkleRoot": "f7432b3219b2aa4122e289f44901830fa32f224ee9dfce28565677f1d279b2c7",
    },
}


@pytest.fixture
def report():
    return build_report


@pytest.fixture
def engine():
    return ScriptedEngine()


@pytest.fixture
def wrapped_certificate():
    return copy.deepcopy(WRAPPED_CERTIFICATE)
