"""Certflow exceptions.

Every terminal failure of a retrieval/verification session or of a
one-shot dispatch maps to one of these classes.  Each carries a stable
``code`` so that callers can branch without parsing messages.
"""

from __future__ import annotations

from typing import Optional


class CertflowError(Exception):
    """Base exception for certflow errors."""

    code = "CERTFLOW_ERROR"

    def __init__(self, message: str, code: Optional[str] = None):
        self.message = message
        if code is not None:
            self.code = code
        super().__init__(message)


# ---------------------------------------------------------------------------
# Retrieval
# ---------------------------------------------------------------------------

class RetrievalError(CertflowError):
    """The certificate could not be loaded from its reference."""

    code = "RETRIEVAL_FAILED"


class HttpFailure(RetrievalError):
    code = "HTTP_FAILURE"

    def __init__(self, uri: str, status_code: Optional[int] = None):
        self.uri = uri
        self.status_code = status_code
        super().__init__(f"Unable to load the certificate from {uri}")


class EmptyDocument(RetrievalError):
    code = "EMPTY_DOCUMENT"

    def __init__(self, uri: str):
        self.uri = uri
        super().__init__(f"Certificate at address {uri} is empty")


class UndecipherableDocument(RetrievalError):
    code = "UNDECIPHERABLE_DOCUMENT"

    def __init__(self, key: Optional[str], type_: Optional[str]):
        self.key = key
        self.type = type_
        super().__init__(
            f"Unable to decrypt certificate with key={key} and type={type_}"
        )


# ---------------------------------------------------------------------------
# Decryption / verification / dispatch
# ---------------------------------------------------------------------------

class DecryptionError(CertflowError):
    code = "DECRYPTION_FAILED"


class VerificationError(CertflowError):
    """The verification engine itself failed (not an invalid certificate)."""

    code = "VERIFICATION_ERRORED"


class DispatchError(CertflowError):
    """A send or share action failed."""

    code = "DISPATCH_FAILED"
