"""Shared dispatch infrastructure for the JSON-RPC server.

dispatch_request() is the per-request boundary. Everything raised below it
is turned into an explicit outcome:

- a Response (success, standard error, or relayed application error)
- None for notifications, even when dispatch failed
- a TransportRejection when the caller is refused (AccessDenied /
  AuthenticationFailure)

Exceptions that are neither JSON-RPC errors nor allow-listed for relay are
not caught and propagate to whoever called the server.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, replace
from typing import Any

from rpcwire.rpc.binder import ParameterSignature, bind_arguments
from rpcwire.rpc.errors import (
    AccessDenied,
    AuthenticationFailure,
    EncodingFailure,
    InvalidRequest,
    JsonRpcError,
    error_object_for,
)
from rpcwire.rpc.protocol import (
    make_error_response,
    make_success_response,
    serialize_response,
    validate_request,
)
from rpcwire.rpc.registry import (
    CallbackBinding,
    ClassMethodBinding,
    ProcedureBinding,
    ProcedureRegistry,
)
from rpcwire.rpc.types import Request, Response, TransportRejection

logger = logging.getLogger(__name__)

# Called as hook(username, password, type_name, method_name) before methods
BeforeHook = Callable[[str | None, str | None, str, str], Any]

AUTHENTICATION_REALM = "rpcwire"


@dataclass(frozen=True)
class Credentials:
    """Username/password already extracted by the transport."""

    username: str | None = None
    password: str | None = None


@dataclass(frozen=True)
class DispatchOptions:
    """Server behaviour shared by every request.

    Attributes:
        before: Hook run before class and instance methods. Either a
            callable, or the name of a method looked up on the target
            instance (skipped when the instance lacks it).
        relay_exceptions: Exception types relayed to the client as
            JSON-RPC errors. Anything else that is not a JsonRpcError
            propagates out of the server.
    """

    before: BeforeHook | str | None = None
    relay_exceptions: tuple[type[BaseException], ...] = ()


@dataclass(frozen=True)
class RequestContext:
    """Everything needed to process one payload.

    The registry and options are shared and read-only. ``payload`` belongs
    to this context alone; batch items each get their own context through
    for_payload().
    """

    registry: ProcedureRegistry
    options: DispatchOptions = DispatchOptions()
    credentials: Credentials = Credentials()
    payload: Any = None

    def for_payload(self, payload: Any) -> RequestContext:
        return replace(self, payload=payload)


def _run_before_hook(context: RequestContext, instance: Any, method_name: str) -> None:
    before = context.options.before
    if not before:
        return

    if callable(before):
        hook = before
    else:
        hook = getattr(instance, before, None)
        if not callable(hook):
            return

    # Result is ignored; the hook may raise to refuse the call
    hook(
        context.credentials.username,
        context.credentials.password,
        type(instance).__name__,
        method_name,
    )


def invoke_binding(
    binding: ProcedureBinding,
    params: list[Any] | dict[str, Any] | None,
    context: RequestContext,
) -> Any:
    """Invoke a resolved procedure with the supplied params.

    Raises:
        InvalidParams: If params do not fit the target's signature.
    """
    if isinstance(binding, CallbackBinding):
        return bind_arguments(params, binding.signature).apply(binding.callback)

    if isinstance(binding, ClassMethodBinding):
        instance = binding.instance()
    else:
        instance = binding.instance

    _run_before_hook(context, instance, binding.method_name)

    method = getattr(instance, binding.method_name)
    signature = ParameterSignature.from_callable(method)
    return bind_arguments(params, signature).apply(method)


def _reject(exc: AccessDenied) -> TransportRejection:
    if isinstance(exc, AuthenticationFailure):
        logger.warning("Authentication failed: %s", exc.message)
        return TransportRejection(
            status=401,
            body='{"error": "Authentication failed"}',
            headers={"WWW-Authenticate": f'Basic realm="{AUTHENTICATION_REALM}"'},
        )

    logger.warning("Access denied: %s", exc.message)
    return TransportRejection(status=403, body='{"error": "Access Forbidden"}')


def dispatch_request(
    request: Request,
    context: RequestContext,
) -> Response | TransportRejection | None:
    """Dispatch a validated request to its procedure.

    Args:
        request: The validated JSON-RPC request.
        context: Registry, options and credentials for this request.

    Returns:
        A Response, None for notifications, or a TransportRejection.
    """
    logger.debug("Dispatching method '%s' (id=%r)", request.method, request.id)

    try:
        binding = context.registry.resolve(request.method)
        result = invoke_binding(binding, request.params, context)
    except AccessDenied as e:
        return _reject(e)
    except JsonRpcError as e:
        logger.debug("Method '%s' failed: %s", request.method, e.message)
        error = e.to_error_object()
    except context.options.relay_exceptions as e:
        logger.debug("Relaying %s from '%s'", type(e).__name__, request.method)
        error = error_object_for(e)
    else:
        if request.is_notification:
            return None
        return make_success_response(request.id, result)

    if request.is_notification:
        return None
    return make_error_response(request.id, error)


def encode_response(response: Response) -> str:
    """Serialize a response, degrading to an internal error if it cannot be.

    The fallback carries the encoder's message in ``data``.
    """
    try:
        return serialize_response(response)
    except EncodingFailure as e:
        logger.warning("Could not encode response for id=%r: %s", response.id, e.message)
        return serialize_response(make_error_response(response.id, e.to_error_object()))


def handle_single(context: RequestContext) -> str | TransportRejection | None:
    """Process the single request held in ``context.payload``.

    Returns:
        Encoded response text, None when no response is due, or a
        TransportRejection.
    """
    try:
        request = validate_request(context.payload)
    except InvalidRequest as e:
        logger.debug("Invalid request: %s", e.message)
        return encode_response(make_error_response(None, e.to_error_object()))

    outcome = dispatch_request(request, context)
    if outcome is None or isinstance(outcome, TransportRejection):
        return outcome
    return encode_response(outcome)
