"""
Certificate retrieval: fetch → unwrap → decrypt-if-needed.

The payload kind is resolved once from the reference key and the
payload's declared ``type``:

  PLAIN                               no key, no type
  ENCRYPTED_MATCHED                   key + recognised encryption type
  ENCRYPTED_UNMATCHED_OR_UNSUPPORTED  key without a matching type, or a
                                      typed document we cannot read
"""

from __future__ import annotations

import json
import logging
from enum import Enum
from typing import Any, Callable, Optional

import httpx

from .crypto import ENCRYPTION_TYPE, decrypt_string
from .errors import (
    DecryptionError,
    EmptyDocument,
    HttpFailure,
    RetrievalError,
    UndecipherableDocument,
)
from .http import open_client
from .schema import CertificateReference

logger = logging.getLogger(__name__)

Decrypt = Callable[..., str]


class PayloadKind(str, Enum):
    PLAIN = "plain"
    ENCRYPTED_MATCHED = "encrypted_matched"
    ENCRYPTED_UNMATCHED_OR_UNSUPPORTED = "encrypted_unmatched_or_unsupported"


def unwrap_document(payload: Any) -> Any:
    """Remove one level of ``{"document": ...}`` nesting, if present."""
    if isinstance(payload, dict) and payload.get("document"):
        return payload["document"]
    return payload


def resolve_payload_kind(payload: dict, key: Optional[str]) -> PayloadKind:
    doc_type = payload.get("type")
    if key and doc_type == ENCRYPTION_TYPE:
        return PayloadKind.ENCRYPTED_MATCHED
    if key or doc_type:
        return PayloadKind.ENCRYPTED_UNMATCHED_OR_UNSUPPORTED
    return PayloadKind.PLAIN


async def fetch_payload(uri: str, client: httpx.AsyncClient | None = None) -> Any:
    """GET *uri*, following redirects, and return the parsed JSON body.

    Raises HttpFailure for transport errors and 4xx/5xx statuses (before
    the body is looked at) and EmptyDocument for an empty body.
    """
    logger.debug("Fetching certificate from %s", uri)
    try:
        async with open_client(client) as http:
            response = await http.get(uri, follow_redirects=True)
    except httpx.HTTPError as e:
        raise HttpFailure(uri) from e

    if 400 <= response.status_code < 600:
        raise HttpFailure(uri, response.status_code)

    if not response.content.strip():
        raise EmptyDocument(uri)
    try:
        return response.json()
    except ValueError as e:
        raise RetrievalError(f"Certificate at address {uri} is not valid JSON") from e


def decrypt_payload(payload: dict, key: str, decrypt: Decrypt = decrypt_string) -> dict:
    plaintext = decrypt(
        tag=payload.get("tag"),
        cipher_text=payload.get("cipherText"),
        iv=payload.get("iv"),
        key=key,
        type_=payload.get("type"),
    )
    try:
        document = json.loads(plaintext)
    except ValueError as e:
        raise DecryptionError("Decrypted certificate is not valid JSON") from e
    if not isinstance(document, dict):
        raise DecryptionError("Decrypted certificate is not a document")
    return document


async def retrieve(
    ref: CertificateReference,
    client: httpx.AsyncClient | None = None,
    decrypt: Decrypt = decrypt_string,
) -> dict:
    """Fetch the certificate behind *ref*, decrypting it when a key is given."""
    payload = unwrap_document(await fetch_payload(ref.uri, client))
    if not payload:
        raise EmptyDocument(ref.uri)
    if not isinstance(payload, dict):
        raise RetrievalError(f"Certificate at address {ref.uri} is not a document")

    kind = resolve_payload_kind(payload, ref.key)
    logger.debug("Payload from %s resolved as %s", ref.uri, kind.value)

    if kind is PayloadKind.ENCRYPTED_MATCHED:
        return decrypt_payload(payload, ref.key, decrypt)
    if kind is PayloadKind.ENCRYPTED_UNMATCHED_OR_UNSUPPORTED:
        raise UndecipherableDocument(ref.key, payload.get("type"))
    return payload
