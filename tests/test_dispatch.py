"""Tests for the send and share dispatchers."""

import json

import httpx
import pytest

from certflow.dispatch import generate_link, send_email
from certflow.errors import DispatchError

EMAIL_URL = "https://api.example.org/email"
SHARE_URL = "https://api.example.org/storage"


def _recording_client(status=200, body=None):
    requests = []

    def handler(request):
        requests.append(request)
        return httpx.Response(status, json=body)

    return httpx.AsyncClient(transport=httpx.MockTransport(handler)), requests


class TestSendEmail:
    @pytest.mark.asyncio
    async def test_200_is_success(self, wrapped_certificate):
        client, requests = _recording_client(200)
        async with client:
            ok = await send_email(wrapped_certificate, "a@b.co", "token", EMAIL_URL, client)
        assert ok is True

        request = requests[0]
        assert request.method == "POST"
        assert str(request.url) == EMAIL_URL
        assert request.headers["content-type"] == "application/json"
        assert json.loads(request.content) == {
            "data": wrapped_certificate,
            "to": "a@b.co",
            "captcha": "token",
        }

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", [201, 204, 400, 500])
    async def test_other_statuses_fail(self, status, wrapped_certificate):
        client, _ = _recording_client(status)
        async with client:
            ok = await send_email(wrapped_certificate, "a@b.co", "token", EMAIL_URL, client)
        assert ok is False

    @pytest.mark.asyncio
    async def test_captcha_required(self, wrapped_certificate):
        client, requests = _recording_client(200)
        async with client:
            with pytest.raises(DispatchError):
                await send_email(wrapped_certificate, "a@b.co", "", EMAIL_URL, client)
        assert requests == []


class TestGenerateLink:
    @pytest.mark.asyncio
    async def test_returns_reply_verbatim(self, wrapped_certificate):
        reply = {"id": "abc", "key": "def", "extra": {"ttl": 5}}
        client, requests = _recording_client(200, reply)
        async with client:
            link = await generate_link(wrapped_certificate, SHARE_URL, 1209600, client)
        assert link == reply

        request = requests[0]
        assert str(request.url) == f"{SHARE_URL}/"
        assert json.loads(request.content) == {"ttl": 1209600, "document": wrapped_certificate}

    @pytest.mark.asyncio
    async def test_missing_fields_are_not_filled_in(self, wrapped_certificate):
        client, _ = _recording_client(200, {"message": "stored"})
        async with client:
            link = await generate_link(wrapped_certificate, SHARE_URL, 60, client)
        assert link == {"message": "stored"}

    @pytest.mark.asyncio
    async def test_status_code_is_not_gated(self, wrapped_certificate):
        client, _ = _recording_client(500, {"error": "boom"})
        async with client:
            link = await generate_link(wrapped_certificate, SHARE_URL, 60, client)
        assert link == {"error": "boom"}
