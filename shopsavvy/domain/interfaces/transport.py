"""Interface for the HTTP transport.

Defines the contract the API client uses to issue a single HTTP request.
A transport performs exactly one attempt: it neither retries nor classifies
HTTP status codes. Transport-level failures (connection errors, timeouts)
propagate as the underlying library's exceptions.
"""

import abc
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional


@dataclass
class TransportResponse:
    """Status, headers and raw body of an HTTP response."""
    status_code: int
    headers: Mapping[str, str] = field(default_factory=dict)
    text: str = ""

    @property
    def is_success(self) -> bool:
        return 200 <= self.status_code < 300


class HttpTransport(abc.ABC):
    """Abstract Base Class for HTTP transports."""

    @abc.abstractmethod
    async def request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[Dict[str, str]] = None,
        json_body: Optional[Dict[str, Any]] = None,
    ) -> TransportResponse:
        """Sends one HTTP request asynchronously.

        Args:
            method: HTTP method ('GET', 'POST', 'DELETE', ...).
            path: Endpoint path relative to the configured base URL.
            params: Optional query string parameters.
            json_body: Optional JSON request body.

        Returns:
            The TransportResponse, whatever its status code.

        Raises:
            Exception: Transport-level failures (network, timeout).
        """
        pass

    @abc.abstractmethod
    async def aclose(self) -> None:
        """Releases the underlying connections."""
        pass
