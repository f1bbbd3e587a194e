"""JSON-RPC 2.0 message types."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

JSONRPC_VERSION = "2.0"


class _Missing:
    """Marker for a request that carries no ``id`` member at all."""

    _instance: _Missing | None = None

    def __new__(cls) -> _Missing:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING: Any = _Missing()


@dataclass
class Request:
    """JSON-RPC 2.0 request.

    Attributes:
        jsonrpc: Protocol version, must be "2.0".
        method: Name of the method to invoke.
        params: Optional positional (list) or named (dict) parameters.
        id: Request identifier. MISSING means notification (no response expected).
            An explicit ``None`` is a regular request whose response has ``id: null``.
    """

    jsonrpc: str
    method: str
    params: list[Any] | dict[str, Any] | None = None
    id: Any = MISSING

    @property
    def is_notification(self) -> bool:
        """Return True if the request has no id member."""
        return self.id is MISSING


@dataclass
class ErrorObject:
    """The ``error`` member of a failed response."""

    code: int
    message: str
    data: Any = None

    def to_dict(self) -> dict[str, Any]:
        error: dict[str, Any] = {"code": self.code, "message": self.message}
        if self.data is not None:
            error["data"] = self.data
        return error

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ErrorObject:
        return cls(
            code=data["code"],
            message=data.get("message", ""),
            data=data.get("data"),
        )


@dataclass
class Response:
    """JSON-RPC 2.0 response.

    Attributes:
        jsonrpc: Protocol version, always "2.0".
        id: Request identifier from the original request (None for
            failures that cannot be attributed to a request).
        result: Result of the method call (mutually exclusive with error).
        error: Error object if method failed (mutually exclusive with result).
    """

    jsonrpc: str
    id: Any
    result: Any | None = None
    error: ErrorObject | None = None

    @property
    def is_error(self) -> bool:
        return self.error is not None


@dataclass
class TransportRejection:
    """Terminal outcome that bypasses JSON-RPC encoding entirely.

    Produced when a procedure or the before-hook refuses the caller. The
    transport is expected to answer with ``status`` and ``body`` as-is.
    """

    status: int
    body: str
    headers: dict[str, str] = field(default_factory=dict)


@dataclass
class ServerReply:
    """What the server hands back to the transport for one raw payload.

    Attributes:
        body: Encoded JSON-RPC response text. Empty when nothing must be
            sent back (notifications only).
        status: HTTP-style status for the transport.
        headers: Headers the transport should emit.
    """

    body: str
    status: int = 200
    headers: dict[str, str] = field(
        default_factory=lambda: {"Content-Type": "application/json"}
    )

    @property
    def rejected(self) -> bool:
        """Return True if the reply is a transport-level rejection."""
        return self.status in (401, 403)

    @classmethod
    def from_rejection(cls, rejection: TransportRejection) -> ServerReply:
        headers = {"Content-Type": "application/json"}
        headers.update(rejection.headers)
        return cls(body=rejection.body, status=rejection.status, headers=headers)
