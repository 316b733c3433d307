"""
Helpers for reading wrapped (salted) certificate documents.

A wrapped document keeps its payload under ``data`` with every leaf value
salted as ``"<salt>:<type>:<value>"``.  These helpers strip the salts and
pull out the fields analytics needs (issuer store addresses, document id).
"""

from __future__ import annotations

from typing import Any

_ADDRESS_FIELDS = ("documentStore", "tokenRegistry", "certificateStore")


def _unsalt(value: str) -> Any:
    parts = value.split(":", 2)
    if len(parts) != 3:
        raise ValueError(f"Value is not salted: {value!r}")
    _, kind, raw = parts
    if kind == "string":
        return raw
    if kind == "number":
        number = float(raw)
        return int(number) if number.is_integer() else number
    if kind == "boolean":
        return raw == "true"
    if kind in ("null", "undefined"):
        return None
    raise ValueError(f"Unknown salted value type: {kind}")


def _strip_salts(node: Any) -> Any:
    if isinstance(node, dict):
        return {k: _strip_salts(v) for k, v in node.items()}
    if isinstance(node, list):
        return [_strip_salts(v) for v in node]
    if isinstance(node, str):
        return _unsalt(node)
    return node


def get_data(certificate: dict) -> dict:
    """Return the unsalted payload of a wrapped certificate."""
    data = certificate.get("data") if isinstance(certificate, dict) else None
    if not isinstance(data, dict):
        raise ValueError("Certificate has no wrapped data")
    return _strip_salts(data)


def get_issuer_addresses(certificate: dict) -> list[str]:
    """Return the store / registry address of every issuer."""
    issuers = get_data(certificate).get("issuers")
    if not isinstance(issuers, list):
        raise ValueError("Certificate has no issuers")
    addresses = []
    for issuer in issuers:
        address = next(
            (issuer[f] for f in _ADDRESS_FIELDS if issuer.get(f)), None
        )
        if address is None:
            raise ValueError("Issuer has no document store or token registry")
        addresses.append(address)
    return addresses


def get_document_id(certificate: dict) -> Any:
    return get_data(certificate).get("id")
