"""HTTP client for calling JSON-RPC 2.0 servers."""

from __future__ import annotations

import base64
import logging
from collections.abc import Callable
from typing import Any

from rpcwire.config.schema import ClientConfig
from rpcwire.rpc.protocol import build_request, decode_response, parse_response, serialize_request
from rpcwire.rpc.transport import HttpTransport, Transport, check_http_status
from rpcwire.rpc.types import Request

logger = logging.getLogger(__name__)

DEFAULT_HEADERS: dict[str, str] = {
    "User-Agent": "rpcwire JSON-RPC client",
    "Content-Type": "application/json",
    "Accept": "application/json",
    "Connection": "close",
}


class Client:
    """Client for JSON-RPC servers.

    Procedures can be called through execute() or as attributes:

        with Client("http://localhost:8000/jsonrpc") as client:
            client.subtract(42, 23)                      # positional params
            client.subtract(minuend=42, subtrahend=23)   # named params
            client.subtract({"minuend": 42, "subtrahend": 23})

    Batch mode collects calls until send():

        client.batch()
        client.random(1, 30)
        client.add(3, 5)
        results = client.send()  # [random result, 8]

    Errors come back typed: MethodNotFound, InvalidParams, ProtocolFault
    subclasses for the standard codes and ApplicationError for the rest.
    """

    def __init__(
        self,
        url: str,
        timeout: float = 3.0,
        headers: dict[str, str] | None = None,
        named_arguments: bool = True,
        verify_ssl: bool = True,
        max_redirects: int = 2,
        transport: Transport | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            url: Server endpoint.
            timeout: Transport timeout in seconds.
            headers: Extra HTTP headers, merged over the defaults.
            named_arguments: If True, a call with a single dict argument sends
                that dict as named params.
            verify_ssl: Verify the server's TLS certificate.
            max_redirects: Redirects followed before failing.
            transport: Custom transport; an HttpTransport is built if omitted.
        """
        self._url = url
        self._timeout = timeout
        self._headers = {**DEFAULT_HEADERS, **(headers or {})}
        self.named_arguments = named_arguments
        self._transport = transport or HttpTransport(
            url, verify_ssl=verify_ssl, max_redirects=max_redirects
        )
        self._batch: list[Request] | None = None
        logger.debug("Client initialized: url=%s, timeout=%s", url, timeout)

    @classmethod
    def from_config(cls, config: ClientConfig, transport: Transport | None = None) -> Client:
        """Create a client from a validated ClientConfig."""
        return cls(
            url=config.url,
            timeout=config.timeout,
            headers=config.headers,
            named_arguments=config.named_arguments,
            verify_ssl=config.verify_ssl,
            max_redirects=config.max_redirects,
            transport=transport,
        )

    def __enter__(self) -> Client:
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()

    def close(self) -> None:
        """Close the underlying transport."""
        self._transport.close()

    def __getattr__(self, name: str) -> Callable[..., Any]:
        if name.startswith("_"):
            raise AttributeError(name)

        def call(*args: Any, **kwargs: Any) -> Any:
            return self.execute(name, self._params_from_call(args, kwargs))

        call.__name__ = name
        return call

    def _params_from_call(
        self, args: tuple[Any, ...], kwargs: dict[str, Any]
    ) -> list[Any] | dict[str, Any]:
        if args and kwargs:
            raise TypeError("JSON-RPC params are either positional or named, not both")
        if kwargs:
            return kwargs
        if self.named_arguments and len(args) == 1 and isinstance(args[0], dict):
            return args[0]
        return list(args)

    @property
    def in_batch(self) -> bool:
        """Return True while calls are being collected for send()."""
        return self._batch is not None

    @property
    def pending(self) -> list[Request]:
        """Requests collected in the current batch."""
        return list(self._batch or [])

    def authentication(self, username: str, password: str) -> Client:
        """Send HTTP Basic credentials with every request."""
        token = base64.b64encode(f"{username}:{password}".encode()).decode("ascii")
        self._headers["Authorization"] = f"Basic {token}"
        return self

    def batch(self) -> Client:
        """Start (or restart) a batch; later calls are queued until send()."""
        self._batch = []
        return self

    def send(self) -> list[Any]:
        """Send the queued batch and return the results in response order.

        Raises:
            JsonRpcError: The mapped error of the first failed call.
        """
        requests = self._batch or []
        self._batch = None

        if not requests:
            return []

        results = parse_response(self._do_request(requests))
        if results is None:
            return []
        if not isinstance(results, list):
            return [results]
        return results

    def execute(
        self,
        procedure: str,
        params: list[Any] | dict[str, Any] | None = None,
    ) -> Any:
        """Call a procedure.

        Args:
            procedure: The procedure name.
            params: Positional (list) or named (dict) params.

        Returns:
            The procedure result, or the client itself while in batch mode.

        Raises:
            JsonRpcError: The mapped JSON-RPC error returned by the server.
            AccessDenied: On HTTP 401/403.
            ConnectionFailure: If the server cannot be reached.
            ServerError: On HTTP 5xx.
        """
        request = build_request(procedure, params)

        if self._batch is not None:
            self._batch.append(request)
            return self

        return parse_response(self._do_request(request))

    def _do_request(self, payload: Request | list[Request]) -> Any:
        body = serialize_request(payload)
        logger.debug("==> Request: %s", body)

        response = self._transport.send(body.encode("utf-8"), dict(self._headers), self._timeout)
        check_http_status(response.status_code)

        logger.debug("<== Response (%d): %s", response.status_code, response.content[:2000])
        return decode_response(response.content)
