"""Concrete implementation of the HttpTransport interface using httpx.

Hides the specifics of the httpx client and translates its responses into
TransportResponse objects. Transport exceptions (httpx.TimeoutException,
httpx.TransportError) propagate untouched; classification is the executor's job.
"""

import logging
from typing import Any, Dict, Mapping, Optional

import httpx

from shopsavvy.domain.interfaces.transport import HttpTransport, TransportResponse

logger = logging.getLogger(__name__)


class HttpxTransport(HttpTransport):
    """httpx.AsyncClient-backed transport."""

    def __init__(
        self,
        base_url: str,
        headers: Optional[Mapping[str, str]] = None,
        timeout: float = 30.0,
        http_transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initializes the transport.

        Args:
            base_url: API root, e.g. https://api.shopsavvy.com/v1.
            headers: Default headers sent with every request.
            timeout: Per-call timeout in seconds.
            http_transport: Low-level httpx transport (tests inject httpx.MockTransport).
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            headers=dict(headers or {}),
            timeout=httpx.Timeout(timeout),
            transport=http_transport,
        )
        logger.debug(f"HttpxTransport initialized for {self.base_url} (timeout={timeout}s)")

    async def request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[Dict[str, str]] = None,
        json_body: Optional[Dict[str, Any]] = None,
    ) -> TransportResponse:
        logger.debug(f"{method} {path} params={params}")
        response = await self._client.request(method, path, params=params, json=json_body)
        return TransportResponse(
            status_code=response.status_code,
            headers=response.headers,
            text=response.text,
        )

    async def aclose(self) -> None:
        await self._client.aclose()
