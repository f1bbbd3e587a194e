"""JSON-RPC 2.0 protocol support.

Server side: decode and validate payloads, split batches, resolve procedures,
bind params and encode responses. Client side: build requests and turn
responses back into results or typed errors.

Example usage:
    server = Server()
    server.register("subtract", lambda minuend, subtrahend: minuend - subtrahend)
    reply = server.execute(raw_body)
"""

from rpcwire.rpc.batch import process_batch
from rpcwire.rpc.binder import (
    BoundArguments,
    Parameter,
    ParameterSignature,
    bind_arguments,
)
from rpcwire.rpc.dispatch_core import (
    Credentials,
    DispatchOptions,
    RequestContext,
    dispatch_request,
    encode_response,
    handle_single,
    invoke_binding,
)
from rpcwire.rpc.errors import (
    INTERNAL_ERROR,
    INVALID_PARAMS,
    INVALID_REQUEST,
    METHOD_NOT_FOUND,
    PARSE_ERROR,
    AccessDenied,
    ApplicationError,
    AuthenticationFailure,
    EncodingFailure,
    InvalidParams,
    InvalidRequest,
    JsonRpcError,
    MethodNotFound,
    ParseError,
    ProtocolFault,
    ResponseDecodeError,
    error_object_for,
    exception_for_error,
    raise_for_error,
)
from rpcwire.rpc.protocol import (
    build_request,
    decode_payload,
    decode_response,
    is_batch,
    make_error_response,
    make_success_response,
    parse_response,
    serialize_request,
    serialize_response,
    validate_request,
)
from rpcwire.rpc.registry import (
    CallbackBinding,
    ClassMethodBinding,
    InstanceMethodBinding,
    ProcedureBinding,
    ProcedureRegistry,
)
from rpcwire.rpc.server import Server
from rpcwire.rpc.transport import (
    ConnectionFailure,
    HttpTransport,
    ServerError,
    Transport,
    TransportError,
    TransportResponse,
    check_http_status,
)
from rpcwire.rpc.types import (
    MISSING,
    ErrorObject,
    Request,
    Response,
    ServerReply,
    TransportRejection,
)

__all__ = [
    # Types
    "MISSING",
    "Request",
    "Response",
    "ErrorObject",
    "ServerReply",
    "TransportRejection",
    # Protocol functions (server-side)
    "decode_payload",
    "is_batch",
    "validate_request",
    "serialize_response",
    "make_error_response",
    "make_success_response",
    # Protocol functions (client-side)
    "build_request",
    "serialize_request",
    "decode_response",
    "parse_response",
    # Error codes
    "PARSE_ERROR",
    "INVALID_REQUEST",
    "METHOD_NOT_FOUND",
    "INVALID_PARAMS",
    "INTERNAL_ERROR",
    # Exceptions
    "JsonRpcError",
    "ProtocolFault",
    "ParseError",
    "InvalidRequest",
    "ResponseDecodeError",
    "MethodNotFound",
    "InvalidParams",
    "EncodingFailure",
    "ApplicationError",
    "AccessDenied",
    "AuthenticationFailure",
    "TransportError",
    "ConnectionFailure",
    "ServerError",
    # Error mapping
    "error_object_for",
    "exception_for_error",
    "raise_for_error",
    # Argument binding
    "Parameter",
    "ParameterSignature",
    "BoundArguments",
    "bind_arguments",
    # Registry and dispatch
    "CallbackBinding",
    "ClassMethodBinding",
    "InstanceMethodBinding",
    "ProcedureBinding",
    "ProcedureRegistry",
    "Credentials",
    "DispatchOptions",
    "RequestContext",
    "dispatch_request",
    "encode_response",
    "handle_single",
    "invoke_binding",
    "process_batch",
    "Server",
    # Transport
    "Transport",
    "TransportResponse",
    "HttpTransport",
    "check_http_status",
]
