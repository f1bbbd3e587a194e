"""HTTP transport for the JSON-RPC client.

The client only needs something with a send() method that POSTs bytes and
returns the status code and body; HttpTransport is the httpx-based default.
HTTP status codes are classified by check_http_status() so the client never
deals with raw statuses beyond that point.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Protocol

import httpx

from rpcwire.core.errors import RpcWireError
from rpcwire.rpc.errors import AccessDenied

logger = logging.getLogger(__name__)


class TransportError(RpcWireError):
    """Base class for client-side transport failures."""


class ConnectionFailure(TransportError):
    """Raised when the server cannot be reached (refused, DNS, timeout, 404)."""


class ServerError(TransportError):
    """Raised when the server answers with a 5xx status."""


@dataclass
class TransportResponse:
    """Status code and raw body of one exchange."""

    status_code: int
    content: bytes


class Transport(Protocol):
    """Anything able to deliver a request body and return the answer."""

    def send(self, body: bytes, headers: dict[str, str], timeout: float) -> TransportResponse: ...

    def close(self) -> None: ...


def check_http_status(status_code: int) -> None:
    """Raise the typed error for a failed HTTP status.

    Raises:
        AccessDenied: For 401 and 403.
        ConnectionFailure: For 404.
        ServerError: For any 5xx.
    """
    if status_code in (401, 403):
        raise AccessDenied(f"Response: HTTP {status_code}")
    if status_code == 404:
        raise ConnectionFailure(f"Response: HTTP {status_code}")
    if status_code >= 500:
        raise ServerError(f"Response: HTTP {status_code}")


class HttpTransport:
    """POSTs request bodies to a fixed URL with httpx."""

    def __init__(
        self,
        url: str,
        verify_ssl: bool = True,
        max_redirects: int = 2,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """Initialize the transport.

        Args:
            url: Server endpoint.
            verify_ssl: Verify the server's TLS certificate.
            max_redirects: Redirects followed before failing.
            transport: Optional httpx transport (e.g. httpx.MockTransport in tests).
        """
        self._url = url.strip()
        self._client = httpx.Client(
            verify=verify_ssl,
            follow_redirects=True,
            max_redirects=max_redirects,
            transport=transport,
        )

    @property
    def url(self) -> str:
        return self._url

    def send(self, body: bytes, headers: dict[str, str], timeout: float) -> TransportResponse:
        """POST ``body`` and return the answer.

        Raises:
            ConnectionFailure: On connection errors, timeouts or too many redirects.
        """
        try:
            response = self._client.post(
                self._url,
                content=body,
                headers=headers,
                timeout=timeout,
            )
        except httpx.TimeoutException as e:
            logger.warning("Request timed out: url=%s, timeout=%s", self._url, timeout)
            raise ConnectionFailure(f"Request timed out: {e}") from e
        except httpx.TooManyRedirects as e:
            logger.warning("Too many redirects for %s", self._url)
            raise ConnectionFailure(f"Too many redirects: {e}") from e
        except httpx.TransportError as e:
            logger.warning("Connection failed to %s: %s", self._url, e)
            raise ConnectionFailure(f"Unable to establish a connection: {e}") from e

        return TransportResponse(status_code=response.status_code, content=response.content)

    def close(self) -> None:
        self._client.close()
