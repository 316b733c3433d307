"""
Runtime configuration for certflow.

Everything here is consumed, not owned, by the orchestrator: the target
network for the verification engine, the email and share-link endpoints,
the share-link TTL and the captcha site key.  Values default to the public
mainnet endpoints and can be overridden through ``CERTFLOW_*`` environment
variables.
"""

from __future__ import annotations

import os
from dataclasses import dataclass

DEFAULT_NETWORK_NAME = "homestead"
DEFAULT_EMAIL_API_URL = "https://api.opencerts.io/email"
DEFAULT_SHARE_LINK_API_URL = "https://api.opencerts.io/storage"
DEFAULT_VERIFIER_API_URL = "https://api.opencerts.io/verify"

# 14 days
DEFAULT_SHARE_LINK_TTL = 1_209_600


@dataclass(frozen=True)
class CertflowConfig:
    """Endpoints and constants used by the retrieval/verification session."""
    network_name: str = DEFAULT_NETWORK_NAME
    email_api_url: str = DEFAULT_EMAIL_API_URL
    share_link_api_url: str = DEFAULT_SHARE_LINK_API_URL
    share_link_ttl: int = DEFAULT_SHARE_LINK_TTL
    verifier_api_url: str = DEFAULT_VERIFIER_API_URL
    captcha_client_key: str = ""

    @classmethod
    def from_env(cls) -> "CertflowConfig":
        env = os.environ
        return cls(
            network_name=env.get("CERTFLOW_NETWORK_NAME", DEFAULT_NETWORK_NAME),
            email_api_url=env.get("CERTFLOW_EMAIL_API_URL", DEFAULT_EMAIL_API_URL),
            share_link_api_url=env.get(
                "CERTFLOW_SHARE_LINK_API_URL", DEFAULT_SHARE_LINK_API_URL
            ),
            share_link_ttl=int(
                env.get("CERTFLOW_SHARE_LINK_TTL", DEFAULT_SHARE_LINK_TTL)
            ),
            verifier_api_url=env.get(
                "CERTFLOW_VERIFIER_API_URL", DEFAULT_VERIFIER_API_URL
            ),
            captcha_client_key=env.get("CERTFLOW_CAPTCHA_CLIENT_KEY", ""),
        )
