"""JSON-RPC 2.0 protocol parsing and serialization."""

from __future__ import annotations

import json
import random
from collections.abc import Sequence
from typing import Any

from rpcwire.rpc.errors import (
    EncodingFailure,
    InvalidRequest,
    ParseError,
    ResponseDecodeError,
    raise_for_error,
)
from rpcwire.rpc.types import JSONRPC_VERSION, MISSING, ErrorObject, Request, Response

# Upper bound for generated request ids
MAX_REQUEST_ID = 2**31 - 1


def decode_payload(raw: str | bytes) -> Any:
    """Decode a raw request body into JSON data.

    Args:
        raw: The un-parsed request body.

    Returns:
        The decoded JSON value (object, array or scalar).

    Raises:
        ParseError: If the body is not valid JSON text or nests too deeply.
    """
    try:
        return json.loads(raw)
    except (json.JSONDecodeError, UnicodeDecodeError, RecursionError) as e:
        raise ParseError(f"Invalid JSON: {e}") from e


def is_batch(payload: Any) -> bool:
    """Return True if the payload is a batch.

    A batch is a non-empty JSON array. An empty array is not a batch: it is
    validated as a single request and rejected as invalid.
    """
    return isinstance(payload, list) and len(payload) > 0


def validate_request(data: Any) -> Request:
    """Validate a decoded JSON value as a single JSON-RPC 2.0 Request.

    Args:
        data: A decoded JSON value.

    Returns:
        A Request object. ``id`` is MISSING when the member is absent.

    Raises:
        InvalidRequest: If the value is not a request object.
    """
    if not isinstance(data, dict):
        raise InvalidRequest(f"Request must be a JSON object, got: {type(data).__name__}")

    jsonrpc = data.get("jsonrpc")
    if jsonrpc != JSONRPC_VERSION:
        raise InvalidRequest(f"jsonrpc must be '2.0', got: {jsonrpc!r}")

    method = data.get("method")
    if not isinstance(method, str):
        raise InvalidRequest(f"method must be a string, got: {type(method).__name__}")

    # Params are optional, but must be an array or an object when present
    params = data.get("params")
    if params is not None and not isinstance(params, (dict, list)):
        raise InvalidRequest(f"params must be object or array, got: {type(params).__name__}")

    return Request(
        jsonrpc=jsonrpc,
        method=method,
        params=params,
        id=data.get("id", MISSING),
    )


def make_error_response(request_id: Any, error: ErrorObject) -> Response:
    """Create an error response.

    Args:
        request_id: The id from the original request, or None when the
            failure cannot be attributed to a request.
        error: The error member to send.

    Returns:
        A Response with the error field populated.
    """
    return Response(jsonrpc=JSONRPC_VERSION, id=request_id, error=error)


def make_success_response(request_id: Any, result: Any) -> Response:
    """Create a success response.

    Args:
        request_id: The id from the original request.
        result: The result of the method call.

    Returns:
        A Response with the result field populated.
    """
    return Response(jsonrpc=JSONRPC_VERSION, id=request_id, result=result)


def response_to_dict(response: Response) -> dict[str, Any]:
    """Build the wire object for a response (exactly one of result/error)."""
    data: dict[str, Any] = {
        "jsonrpc": response.jsonrpc,
        "id": response.id,
    }

    if response.error is not None:
        data["error"] = response.error.to_dict()
    else:
        data["result"] = response.result

    return data


def serialize_response(response: Response) -> str:
    """Serialize a Response to a JSON line.

    Args:
        response: The Response object to serialize.

    Returns:
        A single line of JSON text (no trailing newline).

    Raises:
        EncodingFailure: If the result holds values JSON cannot represent
            (unsupported types, NaN or Infinity) or nests too deeply.
    """
    try:
        return json.dumps(response_to_dict(response), separators=(",", ":"), allow_nan=False)
    except (TypeError, ValueError, RecursionError) as e:
        raise EncodingFailure(str(e)) from e


# === Client-side functions ===


def new_request_id() -> int:
    """Return a random request id.

    Ids are random, not guaranteed unique; a collision is accepted.
    """
    return random.randint(1, MAX_REQUEST_ID)


def build_request(
    method: str,
    params: list[Any] | dict[str, Any] | None = None,
    request_id: Any = None,
) -> Request:
    """Build an outgoing request with a fresh id.

    Args:
        method: The procedure name.
        params: Positional (list) or named (dict) arguments. Empty params
            are left out of the envelope.
        request_id: Explicit id; a random one is generated when None.

    Returns:
        A Request ready to serialize.
    """
    return Request(
        jsonrpc=JSONRPC_VERSION,
        method=method,
        params=params or None,
        id=new_request_id() if request_id is None else request_id,
    )


def request_to_dict(request: Request) -> dict[str, Any]:
    """Build the wire object for a request."""
    data: dict[str, Any] = {
        "jsonrpc": request.jsonrpc,
        "method": request.method,
    }

    if request.params is not None:
        data["params"] = request.params

    if not request.is_notification:
        data["id"] = request.id

    return data


def serialize_request(request: Request | Sequence[Request]) -> str:
    """Serialize a Request, or a batch of them, to a JSON line.

    Args:
        request: A single Request or a sequence of Requests (batch).

    Returns:
        A single line of JSON text (no trailing newline).
    """
    if isinstance(request, Request):
        data: Any = request_to_dict(request)
    else:
        data = [request_to_dict(item) for item in request]

    return json.dumps(data, separators=(",", ":"))


def decode_response(text: str | bytes) -> Any:
    """Decode a response body.

    Args:
        text: The raw response body.

    Returns:
        The decoded JSON value, or None for an empty body.

    Raises:
        ResponseDecodeError: If the body is not valid JSON.
    """
    if not text or not text.strip():
        return None

    try:
        return json.loads(text)
    except (json.JSONDecodeError, UnicodeDecodeError, RecursionError) as e:
        raise ResponseDecodeError(f"Invalid JSON: {e}") from e


def response_from_dict(data: Any) -> Response:
    """Read one decoded response object.

    An ``error`` member with a ``code`` marks a failure. Otherwise the
    response is a success; a missing ``result`` reads as None.

    Raises:
        ResponseDecodeError: If the item is not a JSON object.
    """
    if not isinstance(data, dict):
        raise ResponseDecodeError(f"Response must be a JSON object, got: {type(data).__name__}")

    error = data.get("error")
    if isinstance(error, dict) and "code" in error:
        return Response(
            jsonrpc=data.get("jsonrpc", JSONRPC_VERSION),
            id=data.get("id"),
            error=ErrorObject.from_dict(error),
        )

    return Response(
        jsonrpc=data.get("jsonrpc", JSONRPC_VERSION),
        id=data.get("id"),
        result=data.get("result"),
    )


def get_result(response: Response) -> Any:
    """Return the result of a response, raising the mapped error on failure."""
    if response.is_error:
        raise_for_error(response.error)
    return response.result


def parse_response(payload: Any) -> Any:
    """Turn a decoded response payload into procedure result(s).

    Args:
        payload: The decoded body: an object for a single call, an array for
            a batch, or None for an empty body.

    Returns:
        The result of a single call, or the list of results of a batch in
        response order.

    Raises:
        JsonRpcError: The mapped error of the first failed response.
        ResponseDecodeError: If a response item is not a JSON object.
    """
    if payload is None:
        return None

    if isinstance(payload, list):
        return [get_result(response_from_dict(item)) for item in payload]

    return get_result(response_from_dict(payload))
