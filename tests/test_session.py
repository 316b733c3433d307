"""Tests for the certificate session (state ownership and sequencing)."""

import asyncio

import httpx
import pytest

from certflow.analytics import RecordingAnalyticsSink
from certflow.config import CertflowConfig
from certflow.schema import CertificateReference, SessionState
from certflow.session import CertificateSession

CONFIG = CertflowConfig(
    network_name="ropsten",
    email_api_url="https://api.example.org/email",
    share_link_api_url="https://api.example.org/storage",
    share_link_ttl=60,
)
CERT_URI = "https://certs.example.org/cert.json"


def _session(engine, routes, email_status=200, share_body=None, cert_body=None, cert_status=200):
    def handler(request):
        url = str(request.url)
        if url == CERT_URI:
            return httpx.Response(cert_status, json=cert_body)
        if url == CONFIG.email_api_url:
            return httpx.Response(email_status)
        if url.startswith(CONFIG.share_link_api_url):
            return httpx.Response(200, json=share_body)
        return httpx.Response(404)

    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return CertificateSession(
        config=CONFIG,
        engine=engine,
        client=client,
        analytics=RecordingAnalyticsSink(),
        navigator=routes.append,
    )


class TestRetrieveByAction:
    @pytest.mark.asyncio
    async def test_success_flow(self, engine, wrapped_certificate):
        routes = []
        session = _session(engine, routes, cert_body={"document": wrapped_certificate})
        await session.retrieve_by_action(CertificateReference(uri=CERT_URI))

        assert session.retrieve_state == SessionState.SUCCESS
        assert session.certificate == wrapped_certificate
        assert session.valid is True
        assert session.verifying is False
        assert session.route == "/viewer"
        assert routes == ["/viewer"]
        assert engine.calls[0][1] == "ropsten"

    @pytest.mark.asyncio
    async def test_retrieval_failure_is_state(self, engine):
        session = _session(engine, [], cert_status=404)
        await session.retrieve_by_action(CertificateReference(uri=CERT_URI))

        assert session.retrieve_state == SessionState.FAILURE
        assert session.retrieve_error == f"Unable to load the certificate from {CERT_URI}"
        assert session.certificate is None
        assert engine.calls == []

    @pytest.mark.asyncio
    async def test_undecipherable_is_state(self, engine):
        session = _session(engine, [], cert_body={"a": 1})
        await session.retrieve_by_action(CertificateReference(uri=CERT_URI, key="ab"))
        assert session.retrieve_state == SessionState.FAILURE
        assert "Unable to decrypt certificate" in session.retrieve_error

    @pytest.mark.asyncio
    async def test_invalid_certificate_categories(self, engine, report, wrapped_certificate):
        engine.report = report(revoked="INVALID")
        session = _session(engine, [], cert_body=wrapped_certificate)
        await session.retrieve_by_action(CertificateReference(uri=CERT_URI))

        snap = session.snapshot()
        assert snap["valid"] is False
        assert snap["route"] is None
        assert [e["category"] for e in snap["errors"]] == ["REVOKED"]
        assert snap["errors"][0]["title"] == "Certificate has been revoked"
        assert len(session.analytics.events) == 1

    @pytest.mark.asyncio
    async def test_verification_error_is_distinct(self, engine, wrapped_certificate):
        engine.error = RuntimeError("engine down")
        session = _session(engine, [], cert_body=wrapped_certificate)
        await session.retrieve_by_action(CertificateReference(uri=CERT_URI))

        assert session.retrieve_state == SessionState.SUCCESS
        assert session.verification_error == "engine down"
        assert session.valid is None
        assert session.verification_status is None


class TestSequencing:
    @pytest.mark.asyncio
    async def test_newer_certificate_wins(self, engine, report):
        routes = []
        session = _session(engine, routes)
        engine.gates["first"] = asyncio.Event()
        engine.reports_by_id["first"] = report()
        engine.reports_by_id["second"] = report(hash="INVALID")

        first = asyncio.create_task(session.update_certificate({"name": "first"}))
        await asyncio.sleep(0)
        await session.update_certificate({"name": "second"})

        engine.gates["first"].set()
        await first

        assert session.certificate == {"name": "second"}
        assert session.valid is False
        assert session.route is None
        assert routes == []
        assert session.sequence == 2

    @pytest.mark.asyncio
    async def test_failed_retrieval_clears_superseded_verification(self, engine, report):
        session = _session(engine, [], cert_status=404)
        engine.gates["first"] = asyncio.Event()
        engine.reports_by_id["first"] = report()

        first = asyncio.create_task(session.update_certificate({"name": "first"}))
        await asyncio.sleep(0)
        assert session.verifying is True

        await session.retrieve_by_action(CertificateReference(uri=CERT_URI))
        engine.gates["first"].set()
        await first

        assert session.retrieve_state == SessionState.FAILURE
        assert session.verifying is False
        assert session.snapshot()["verifying"] is False
        assert session.valid is None

    @pytest.mark.asyncio
    async def test_new_certificate_resets_actions(self, engine):
        session = _session(engine, [], share_body={"id": "1", "key": "2"})
        await session.update_certificate({"name": "a"})
        await session.generate_share_link()
        assert session.share_link_state == SessionState.SUCCESS

        await session.update_certificate({"name": "b"})
        assert session.share_link == {}
        assert session.share_link_state == SessionState.IDLE
        assert session.email_state == SessionState.IDLE


class TestSend:
    @pytest.mark.asyncio
    async def test_send_success(self, engine):
        session = _session(engine, [])
        await session.update_certificate({"name": "a"})
        assert await session.send_certificate("a@b.co", "token") is True
        assert session.email_state == SessionState.SUCCESS

    @pytest.mark.asyncio
    async def test_send_non_200_fails(self, engine):
        session = _session(engine, [], email_status=201)
        await session.update_certificate({"name": "a"})
        assert await session.send_certificate("a@b.co", "token") is False
        assert session.email_state == SessionState.FAILURE
        assert session.email_error == "Fail to send certificate"

    @pytest.mark.asyncio
    async def test_send_suppressed_while_pending(self, engine):
        session = _session(engine, [])
        await session.update_certificate({"name": "a"})
        session.email_state = SessionState.PENDING
        assert await session.send_certificate("a@b.co", "token") is False
        assert session.email_state == SessionState.PENDING

    @pytest.mark.asyncio
    async def test_send_without_captcha(self, engine):
        session = _session(engine, [])
        await session.update_certificate({"name": "a"})
        assert await session.send_certificate("a@b.co", "") is False
        assert session.email_state == SessionState.FAILURE

    @pytest.mark.asyncio
    async def test_send_without_certificate(self, engine):
        session = _session(engine, [])
        assert await session.send_certificate("a@b.co", "token") is False
        assert session.email_error == "No certificate to send"


class TestShare:
    @pytest.mark.asyncio
    async def test_share_success(self, engine):
        session = _session(engine, [], share_body={"id": "abc", "key": "def"})
        await session.update_certificate({"name": "a"})
        link = await session.generate_share_link()
        assert link == {"id": "abc", "key": "def"}
        assert session.share_link == link
        assert session.share_link_state == SessionState.SUCCESS

    @pytest.mark.asyncio
    async def test_empty_reply_is_failure(self, engine):
        session = _session(engine, [], share_body={})
        await session.update_certificate({"name": "a"})
        assert await session.generate_share_link() is None
        assert session.share_link_state == SessionState.FAILURE
        assert session.share_link_error == "Fail to generate certificate share link"
