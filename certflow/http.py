"""Shared httpx client handling."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator

import httpx

JSON_HEADERS = {
    "Accept": "application/json",
    "Content-Type": "application/json",
}


@asynccontextmanager
async def open_client(client: httpx.AsyncClient | None = None) -> AsyncIterator[httpx.AsyncClient]:
    """Yield *client* as-is, or a short-lived client that is closed afterwards."""
    if client is not None:
        yield client
        return
    async with httpx.AsyncClient() as owned:
        yield owned
