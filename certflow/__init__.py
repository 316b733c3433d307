"""Certflow — certificate retrieval, verification and classification."""

from .config import CertflowConfig
from .crypto import decrypt_string, encrypt_string, generate_encryption_key
from .errors import (
    CertflowError,
    DecryptionError,
    DispatchError,
    EmptyDocument,
    HttpFailure,
    RetrievalError,
    UndecipherableDocument,
    VerificationError,
)
from .fragments import ERROR_MESSAGES, ErrorCategory, classify, is_valid
from .retrieval import PayloadKind, retrieve
from .schema import (
    CertificateReference,
    CheckType,
    Fragment,
    FragmentStatus,
    SessionState,
)
from .session import CertificateSession
from .verification import VerificationOutcome, verify_certificate

__all__ = [
    "CertflowConfig",
    "decrypt_string",
    "encrypt_string",
    "generate_encryption_key",
    "CertflowError",
    "DecryptionError",
    "DispatchError",
    "EmptyDocument",
    "HttpFailure",
    "RetrievalError",
    "UndecipherableDocument",
    "VerificationError",
    "ERROR_MESSAGES",
    "ErrorCategory",
    "classify",
    "is_valid",
    "PayloadKind",
    "retrieve",
    "CertificateReference",
    "CheckType",
    "Fragment",
    "FragmentStatus",
    "SessionState",
    "CertificateSession",
    "VerificationOutcome",
    "verify_certificate",
]
