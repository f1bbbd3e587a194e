"""Procedure registry: method names to executable targets.

Three kinds of target exist:

- CallbackBinding: a free function registered under a name.
- ClassMethodBinding: a (class or instance, method name) pair bound under a
  name. A class is instantiated on every call.
- InstanceMethodBinding: a public method of an attached instance, matched
  by its own name.

Resolution order, first match wins: callbacks, explicit class/method
bindings whose method exists, then attached instances in attachment order.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from rpcwire.rpc.binder import ParameterSignature
from rpcwire.rpc.errors import MethodNotFound

logger = logging.getLogger(__name__)


def _exposed_method(target: Any, name: str) -> Callable[..., Any] | None:
    """Return the public callable ``name`` of ``target``, or None."""
    if not name or name.startswith("_"):
        return None
    method = getattr(target, name, None)
    return method if callable(method) else None


@dataclass(frozen=True)
class CallbackBinding:
    """A free function. Its signature is introspected once at registration."""

    callback: Callable[..., Any]
    signature: ParameterSignature


@dataclass(frozen=True)
class ClassMethodBinding:
    """A method on a class (instantiated per call) or on a given instance."""

    target: Any
    method_name: str

    def instance(self) -> Any:
        if isinstance(self.target, type):
            return self.target()
        return self.target


@dataclass(frozen=True)
class InstanceMethodBinding:
    """A method on an attached instance, owned by the caller."""

    instance: Any
    method_name: str


ProcedureBinding = CallbackBinding | ClassMethodBinding | InstanceMethodBinding


@dataclass
class ProcedureRegistry:
    """Maps method names to procedure bindings.

    Registration is a configuration step done before serving. Concurrent
    registration is serialized by a lock; resolution only reads.
    """

    callbacks: dict[str, CallbackBinding] = field(default_factory=dict)
    classes: dict[str, ClassMethodBinding] = field(default_factory=dict)
    instances: list[Any] = field(default_factory=list)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    def register(self, procedure: str, callback: Callable[..., Any]) -> None:
        """Register a free function under ``procedure``."""
        binding = CallbackBinding(callback, ParameterSignature.from_callable(callback))
        with self._lock:
            self.callbacks[procedure] = binding
        logger.debug("Registered procedure: %s", procedure)

    def bind(self, procedure: str, target: Any, method: str = "") -> None:
        """Bind ``procedure`` to a method of a class or instance.

        Args:
            procedure: Public procedure name.
            target: A class (instantiated per call) or an instance.
            method: Method name on the target; defaults to ``procedure``.
        """
        with self._lock:
            self.classes[procedure] = ClassMethodBinding(target, method or procedure)
        logger.debug("Bound procedure %s to %r.%s", procedure, target, method or procedure)

    def attach(self, instance: Any) -> None:
        """Expose every public method of ``instance`` under its own name."""
        with self._lock:
            self.instances.append(instance)
        logger.debug("Attached instance: %s", type(instance).__name__)

    def resolve(self, procedure: str) -> ProcedureBinding:
        """Find the binding for a method name.

        Raises:
            MethodNotFound: If no target provides the procedure.
        """
        callback = self.callbacks.get(procedure)
        if callback is not None:
            return callback

        bound = self.classes.get(procedure)
        if bound is not None and callable(getattr(bound.target, bound.method_name, None)):
            return bound

        for instance in self.instances:
            if _exposed_method(instance, procedure) is not None:
                return InstanceMethodBinding(instance, procedure)

        raise MethodNotFound(f"Unable to find the procedure: {procedure}")
