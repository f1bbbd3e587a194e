"""JSON-RPC error taxonomy and the code <-> exception mapping.

The same classes are used on both sides of the wire. A server procedure
raises one of them and the dispatcher turns it into an ``error`` member;
a client receiving that member gets the matching class raised back:

    -32700  ParseError        (ProtocolFault)
    -32600  InvalidRequest    (ProtocolFault)
    -32601  MethodNotFound
    -32602  InvalidParams
    -32603  EncodingFailure
    other   ApplicationError  (code, message and data preserved)

AccessDenied and AuthenticationFailure are not JSON-RPC errors. They
short-circuit to a transport-level rejection on the server, and are
raised on the client for HTTP 401/403.
"""

from __future__ import annotations

from typing import Any

from rpcwire.core.errors import RpcWireError
from rpcwire.rpc.types import ErrorObject

# JSON-RPC 2.0 error codes
PARSE_ERROR = -32700
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602
INTERNAL_ERROR = -32603


class JsonRpcError(RpcWireError):
    """Base class for errors that travel as a JSON-RPC ``error`` member."""

    code: int = INTERNAL_ERROR
    default_message: str = "Internal error"

    def __init__(self, message: str | None = None, data: Any = None) -> None:
        super().__init__(message or self.default_message)
        self.data = data

    def to_error_object(self) -> ErrorObject:
        """Return the wire error for this exception.

        Standard errors always use the protocol's fixed message; the detail
        given at raise time stays server-side.
        """
        return ErrorObject(code=self.code, message=self.default_message)


class ProtocolFault(JsonRpcError):
    """The payload itself was unusable (parse error or invalid request)."""


class ParseError(ProtocolFault):
    """Raised when the payload is not syntactically valid JSON."""

    code = PARSE_ERROR
    default_message = "Parse error"


class InvalidRequest(ProtocolFault):
    """Raised when the payload is JSON but not a valid request object."""

    code = INVALID_REQUEST
    default_message = "Invalid Request"


class ResponseDecodeError(ProtocolFault):
    """Raised on the client when a response body cannot be understood."""

    code = PARSE_ERROR
    default_message = "Parse error"


class MethodNotFound(JsonRpcError):
    """Raised when no procedure matches the requested method name."""

    code = METHOD_NOT_FOUND
    default_message = "Method not found"


class InvalidParams(JsonRpcError):
    """Raised when the supplied params cannot be bound to the procedure."""

    code = INVALID_PARAMS
    default_message = "Invalid params"


class EncodingFailure(JsonRpcError):
    """Raised when a procedure result cannot be serialized to JSON."""

    code = INTERNAL_ERROR
    default_message = "Internal error"

    def to_error_object(self) -> ErrorObject:
        return ErrorObject(code=self.code, message=self.default_message, data=self.message)


class ApplicationError(JsonRpcError):
    """Application-level error carrying its own code, message and data.

    Procedures raise it to report a domain failure to the caller. It is
    always relayed verbatim. Clients receive it for any code outside the
    standard table.
    """

    def __init__(self, message: str, code: int = 0, data: Any = None) -> None:
        super().__init__(message, data)
        self.code = code

    def to_error_object(self) -> ErrorObject:
        return ErrorObject(code=self.code, message=self.message, data=self.data)


class AccessDenied(RpcWireError):
    """Raised when the caller is not allowed to use the procedure (HTTP 403)."""


class AuthenticationFailure(AccessDenied):
    """Raised when the caller's credentials are missing or wrong (HTTP 401)."""


_ERRORS_BY_CODE: dict[int, type[JsonRpcError]] = {
    PARSE_ERROR: ParseError,
    INVALID_REQUEST: InvalidRequest,
    METHOD_NOT_FOUND: MethodNotFound,
    INVALID_PARAMS: InvalidParams,
}


def error_object_for(exc: BaseException) -> ErrorObject:
    """Map a raised exception to the error member sent to the client.

    JsonRpcError subclasses use their own mapping. Anything else is an
    allow-listed relay: its integer ``code`` attribute if present, else 0,
    and its string form as the message.
    """
    if isinstance(exc, JsonRpcError):
        return exc.to_error_object()

    code = getattr(exc, "code", 0)
    if not isinstance(code, int) or isinstance(code, bool):
        code = 0
    return ErrorObject(code=code, message=str(exc))


def exception_for_error(error: ErrorObject) -> JsonRpcError:
    """Map a received error member to the exception the caller should see."""
    error_cls = _ERRORS_BY_CODE.get(error.code)
    if error_cls is None:
        return ApplicationError(error.message, error.code, error.data)
    return error_cls(f"{error_cls.default_message}: {error.message}", error.data)


def raise_for_error(error: ErrorObject) -> None:
    """Raise the exception mapped from ``error``."""
    raise exception_for_error(error)
