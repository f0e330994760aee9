"""Outbound HTTP client used to forward appended strings."""
from __future__ import annotations

from typing import Protocol

import httpx

from .models import ForwardOutcome

JSON_HEADERS = {"Content-Type": "application/json"}


class Forwarder(Protocol):
    async def post(self, url: str, body: bytes) -> ForwardOutcome: ...


class HttpxForwarder:
    """POSTs JSON bodies with a shared ``httpx.AsyncClient``.

    A single attempt is made per call. Request failures are returned as a
    ``ForwardOutcome`` rather than raised; HTTP error statuses are returned
    untouched for the caller to interpret. A body that fails Content-Encoding
    decoding is reported as empty.
    """

    def __init__(self, timeout: float = 10.0, client: httpx.AsyncClient | None = None):
        if client is None:
            client = httpx.AsyncClient(timeout=timeout)
        else:
            client.timeout = timeout
        self._client = client

    @property
    def timeout(self) -> httpx.Timeout:
        return self._client.timeout

    async def post(self, url: str, body: bytes) -> ForwardOutcome:
        try:
            async with self._client.stream("POST", url, content=body, headers=JSON_HEADERS) as resp:
                try:
                    content = await resp.aread()
                except httpx.DecodingError:
                    # body is never relayed, the status still stands
                    content = b""
        except httpx.RequestError as exc:
            return ForwardOutcome(transport_error=exc)
        return ForwardOutcome(status_code=resp.status_code, body=content)

    async def aclose(self) -> None:
        await self._client.aclose()
