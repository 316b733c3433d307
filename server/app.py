"""
Certflow FastAPI server.

Endpoints:
  POST /certificates/retrieve  — fetch (and decrypt) a certificate, then verify it
  POST /certificates/verify    — verify a certificate supplied in the body
  GET  /certificates/status    — current session state
  POST /certificates/send      — email the held certificate
  POST /certificates/share     — create a share link for the held certificate
  GET  /config/captcha         — captcha site key for the send form
"""

from __future__ import annotations

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware

from certflow.config import CertflowConfig
from certflow.schema import CertificateReference, SessionState
from certflow.session import CertificateSession

from .models import (
    RetrieveRequest,
    SendRequest,
    SendResponse,
    SessionResponse,
    ShareResponse,
    VerifyRequest,
)

app = FastAPI(
    title="certflow",
    description="Certificate retrieval and verification",
    version="0.1.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ---------------------------------------------------------------------------
# Session (one per server process)
# ---------------------------------------------------------------------------
_session: CertificateSession | None = None


def get_session() -> CertificateSession:
    global _session
    if _session is None:
        _session = CertificateSession(config=CertflowConfig.from_env())
    return _session


# ---------------------------------------------------------------------------
# Retrieval & verification
# ---------------------------------------------------------------------------

@app.post("/certificates/retrieve", response_model=SessionResponse)
async def retrieve_certificate(req: RetrieveRequest):
    """Retrieve the certificate behind a URI (optionally encrypted) and verify it."""
    session = get_session()
    await session.retrieve_by_action(CertificateReference(uri=req.uri, key=req.key))
    return session.snapshot()


@app.post("/certificates/verify", response_model=SessionResponse)
async def verify_certificate(req: VerifyRequest):
    session = get_session()
    await session.update_certificate(req.certificate)
    return session.snapshot()


@app.get("/certificates/status", response_model=SessionResponse)
async def status():
    return get_session().snapshot()


# ---------------------------------------------------------------------------
# Actions
# ---------------------------------------------------------------------------

@app.post("/certificates/send", response_model=SendResponse)
async def send(req: SendRequest):
    """Email the held certificate to a recipient."""
    session = get_session()
    if session.certificate is None:
        raise HTTPException(status_code=404, detail="No certificate loaded")
    if session.email_state == SessionState.PENDING:
        raise HTTPException(status_code=409, detail="A send is already pending")

    await session.send_certificate(req.email, req.captcha)
    return SendResponse(
        email_state=session.email_state.value,
        email_error=session.email_error,
    )


@app.post("/certificates/share", response_model=ShareResponse)
async def share():
    session = get_session()
    if session.certificate is None:
        raise HTTPException(status_code=404, detail="No certificate loaded")

    await session.generate_share_link()
    return ShareResponse(
        share_link_state=session.share_link_state.value,
        share_link=session.share_link,
        share_link_error=session.share_link_error,
    )


@app.get("/config/captcha")
async def captcha_key():
    return {"site_key": get_session().config.captcha_client_key}
