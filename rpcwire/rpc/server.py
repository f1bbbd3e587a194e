"""JSON-RPC 2.0 server.

The server takes a raw request body and returns a ServerReply; reading the
body and writing the HTTP response belong to the transport.

Example usage:
    server = Server()

    @server.procedure()
    def subtract(minuend, subtrahend):
        return minuend - subtrahend

    reply = server.execute('{"jsonrpc":"2.0","method":"subtract","params":[42,23],"id":1}')
    reply.body  # '{"jsonrpc":"2.0","id":1,"result":19}'
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import replace
from typing import Any, TypeVar

from rpcwire.config.loader import import_exception
from rpcwire.config.schema import ServerConfig
from rpcwire.rpc.batch import process_batch
from rpcwire.rpc.dispatch_core import (
    BeforeHook,
    Credentials,
    DispatchOptions,
    RequestContext,
    encode_response,
    handle_single,
    invoke_binding,
)
from rpcwire.rpc.errors import ParseError
from rpcwire.rpc.protocol import decode_payload, is_batch, make_error_response
from rpcwire.rpc.registry import ProcedureRegistry
from rpcwire.rpc.types import ServerReply, TransportRejection

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Any])


class Server:
    """Routes JSON-RPC payloads to registered procedures.

    Procedures come from three places, searched in this order: callbacks
    registered with register(), class/instance methods bound with bind(),
    and public methods of instances added with attach().
    """

    def __init__(
        self,
        registry: ProcedureRegistry | None = None,
        options: DispatchOptions | None = None,
    ) -> None:
        self._registry = registry or ProcedureRegistry()
        self._options = options or DispatchOptions()

    @classmethod
    def from_config(cls, config: ServerConfig) -> Server:
        """Create a server from a validated ServerConfig."""
        relay = tuple(import_exception(path) for path in config.relay_exceptions)
        return cls(options=DispatchOptions(before=config.before, relay_exceptions=relay))

    @property
    def registry(self) -> ProcedureRegistry:
        return self._registry

    @property
    def options(self) -> DispatchOptions:
        return self._options

    def register(self, procedure: str, callback: Callable[..., Any]) -> None:
        """Register a free function as ``procedure``."""
        self._registry.register(procedure, callback)

    def procedure(self, name: str | None = None) -> Callable[[F], F]:
        """Decorator form of register(); defaults to the function's name."""

        def register(func: F) -> F:
            self.register(name or func.__name__, func)
            return func

        return register

    def bind(self, procedure: str, target: Any, method: str = "") -> None:
        """Bind ``procedure`` to ``method`` of a class or an instance."""
        self._registry.bind(procedure, target, method)

    def attach(self, instance: Any) -> None:
        """Expose the public methods of ``instance``."""
        self._registry.attach(instance)

    def attach_exception(self, exc_type: type[BaseException] = Exception) -> None:
        """Relay ``exc_type`` (and subclasses) to clients as JSON-RPC errors.

        The error code is the exception's integer ``code`` attribute, or 0.
        """
        relay = self._options.relay_exceptions + (exc_type,)
        self._options = replace(self._options, relay_exceptions=relay)

    def before(self, hook: BeforeHook | str) -> None:
        """Run ``hook`` before every class or instance method call.

        ``hook`` is called as hook(username, password, class_name, method_name).
        A string names a method looked up on the target instance.
        """
        self._options = replace(self._options, before=hook)

    def _context(self, credentials: Credentials | None) -> RequestContext:
        return RequestContext(
            registry=self._registry,
            options=self._options,
            credentials=credentials or Credentials(),
        )

    def execute(self, raw: str | bytes, credentials: Credentials | None = None) -> ServerReply:
        """Process a raw request body.

        Args:
            raw: The un-parsed body received by the transport.
            credentials: Username/password extracted by the transport, if any.

        Returns:
            A ServerReply. Its body is empty when no response is due
            (notifications only).

        Raises:
            Exception: Whatever a procedure raised that is neither a
                JSON-RPC error nor allow-listed with attach_exception().
        """
        try:
            payload = decode_payload(raw)
        except ParseError as e:
            logger.debug("Parse error: %s", e.message)
            return self._parse_error_reply()

        if not isinstance(payload, (dict, list)):
            logger.debug("Malformed payload of type %s", type(payload).__name__)
            return self._parse_error_reply()

        context = self._context(credentials).for_payload(payload)
        if is_batch(payload):
            outcome = process_batch(context, handle_single)
        else:
            outcome = handle_single(context)

        if isinstance(outcome, TransportRejection):
            return ServerReply.from_rejection(outcome)
        return ServerReply(body=outcome or "")

    def execute_procedure(
        self,
        procedure: str,
        params: list[Any] | dict[str, Any] | None = None,
        credentials: Credentials | None = None,
    ) -> Any:
        """Resolve and invoke a procedure directly, without the JSON envelope.

        Raises:
            MethodNotFound: If no target provides ``procedure``.
            InvalidParams: If ``params`` do not fit its signature.
        """
        binding = self._registry.resolve(procedure)
        return invoke_binding(binding, params, self._context(credentials))

    @staticmethod
    def _parse_error_reply() -> ServerReply:
        return ServerReply(
            body=encode_response(make_error_response(None, ParseError().to_error_object()))
        )
