"""
One-shot outbound actions on a held certificate: email it, or store it
behind a share link.

Both functions are stateless.  Suppressing a second send while one is
pending is the caller's job (see ``CertificateSession.send_certificate``).
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from .errors import DispatchError
from .http import JSON_HEADERS, open_client

logger = logging.getLogger(__name__)


async def send_email(
    certificate: dict,
    email: str,
    captcha: str,
    api_url: str,
    client: httpx.AsyncClient | None = None,
) -> bool:
    """POST the certificate to the email service. True only on HTTP 200."""
    if not captcha:
        raise DispatchError("A captcha token is required to send a certificate")

    async with open_client(client) as http:
        response = await http.post(
            api_url,
            json={"data": certificate, "to": email, "captcha": captcha},
            headers=JSON_HEADERS,
        )
    logger.debug("Email service answered %d", response.status_code)
    return response.status_code == 200


async def generate_link(
    certificate: dict,
    api_url: str,
    ttl: int,
    client: httpx.AsyncClient | None = None,
) -> Any:
    """Store the certificate and return the service's JSON reply verbatim.

    The reply is normally ``{"id": ..., "key": ...}``.
    """
    async with open_client(client) as http:
        response = await http.post(
            f"{api_url}/",
            json={"ttl": ttl, "document": certificate},
            headers=JSON_HEADERS,
        )
    return response.json()
