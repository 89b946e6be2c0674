"""
Outbound HTTP capability used by the verification pipeline.

The pipeline only needs one POST and one GET returning a status code and a
body. Anything implementing Transport / AsyncTransport can be injected; the
httpx-backed defaults never follow redirects.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Mapping, Protocol

import httpx


@dataclass(frozen=True)
class TransportResponse:
    """
    Response from the transport.

    Attributes:
        status_code: HTTP status code
        text: Decoded response body
    """
    status_code: int
    text: str

    def json(self) -> Any:
        return json.loads(self.text)


class Transport(Protocol):
    def get(self, url: str, params: Mapping[str, str]) -> TransportResponse: ...

    def post(
        self, url: str, data: Mapping[str, str], headers: Mapping[str, str]
    ) -> TransportResponse: ...


class AsyncTransport(Protocol):
    async def get(self, url: str, params: Mapping[str, str]) -> TransportResponse: ...

    async def post(
        self, url: str, data: Mapping[str, str], headers: Mapping[str, str]
    ) -> TransportResponse: ...


class HttpxTransport:
    """
    Synchronous transport backed by a pooled httpx.Client.

    Args:
        timeout_s: Request timeout in seconds. Default: 10.0
        client: Existing httpx.Client to use instead of creating one
    """

    def __init__(self, timeout_s: float = 10.0, client: httpx.Client | None = None):
        self._owns_client = client is None
        self.client = client or httpx.Client(timeout=timeout_s, follow_redirects=False)

    def get(self, url: str, params: Mapping[str, str]) -> TransportResponse:
        response = self.client.get(url, params=dict(params), follow_redirects=False)
        return TransportResponse(response.status_code, response.text)

    def post(
        self, url: str, data: Mapping[str, str], headers: Mapping[str, str]
    ) -> TransportResponse:
        response = self.client.post(
            url,
            data=dict(data),
            headers=dict(headers),
            follow_redirects=False,
        )
        return TransportResponse(response.status_code, response.text)

    def close(self) -> None:
        if self._owns_client:
            self.client.close()


class AsyncHttpxTransport:
    """
    Asynchronous transport backed by a pooled httpx.AsyncClient.

    Args:
        timeout_s: Request timeout in seconds. Default: 10.0
        client: Existing httpx.AsyncClient to use instead of creating one
    """

    def __init__(self, timeout_s: float = 10.0, client: httpx.AsyncClient | None = None):
        self._owns_client = client is None
        self.client = client or httpx.AsyncClient(timeout=timeout_s, follow_redirects=False)

    async def get(self, url: str, params: Mapping[str, str]) -> TransportResponse:
        response = await self.client.get(url, params=dict(params), follow_redirects=False)
        return TransportResponse(response.status_code, response.text)

    async def post(
        self, url: str, data: Mapping[str, str], headers: Mapping[str, str]
    ) -> TransportResponse:
        response = await self.client.post(
            url,
            data=dict(data),
            headers=dict(headers),
            follow_redirects=False,
        )
        return TransportResponse(response.status_code, response.text)

    async def aclose(self) -> None:
        if self._owns_client:
            await self.client.aclose()
