"""Bind JSON-RPC params to a procedure's declared parameters.

The binder never looks at Python callables directly. Targets are described
once by a ParameterSignature (built with ``inspect``), and binding works on
that descriptor alone:

1. fewer supplied values than required parameters -> InvalidParams
2. more supplied values than the procedure accepts -> InvalidParams
3. a list is positional and passes through in order; a required
   keyword-only parameter it cannot reach (after ``*args``) fails with
   "Missing argument: <name>"
4. a dict is named: each declared parameter takes the same-named value,
   falls back to its default, or fails with "Missing argument: <name>".
   Unknown names are ignored.

Values are never coerced.
"""

from __future__ import annotations

import inspect
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from rpcwire.rpc.errors import InvalidParams

logger = logging.getLogger(__name__)

_NO_DEFAULT: Any = inspect.Parameter.empty


@dataclass(frozen=True)
class Parameter:
    """One declared parameter of a procedure."""

    name: str
    has_default: bool = False
    default: Any = None
    positional_only: bool = False
    keyword_only: bool = False


@dataclass(frozen=True)
class ParameterSignature:
    """Ordered parameter list of a procedure.

    Attributes:
        parameters: Declared parameters in declaration order.
        variadic: True if the procedure accepts any number of extra
            positional values (``*args``); ``max_count`` is then None.
    """

    parameters: tuple[Parameter, ...] = ()
    variadic: bool = False

    @property
    def required_count(self) -> int:
        return sum(1 for p in self.parameters if not p.has_default)

    @property
    def max_count(self) -> int | None:
        if self.variadic:
            return None
        return len(self.parameters)

    @classmethod
    def from_callable(cls, func: Callable[..., Any]) -> ParameterSignature:
        """Introspect a callable (bound methods exclude ``self``).

        ``**kwargs`` is not a declared parameter and is never filled.
        """
        parameters: list[Parameter] = []
        variadic = False

        for p in inspect.signature(func).parameters.values():
            if p.kind is inspect.Parameter.VAR_POSITIONAL:
                variadic = True
                continue
            if p.kind is inspect.Parameter.VAR_KEYWORD:
                continue
            has_default = p.default is not _NO_DEFAULT
            parameters.append(
                Parameter(
                    name=p.name,
                    has_default=has_default,
                    default=p.default if has_default else None,
                    positional_only=p.kind is inspect.Parameter.POSITIONAL_ONLY,
                    keyword_only=p.kind is inspect.Parameter.KEYWORD_ONLY,
                )
            )

        return cls(parameters=tuple(parameters), variadic=variadic)


@dataclass
class BoundArguments:
    """Arguments ready to be applied to the target."""

    args: list[Any] = field(default_factory=list)
    kwargs: dict[str, Any] = field(default_factory=dict)

    def apply(self, func: Callable[..., Any]) -> Any:
        return func(*self.args, **self.kwargs)


def is_positional(params: list[Any] | dict[str, Any]) -> bool:
    """Return True if params address arguments by position."""
    return isinstance(params, list)


def bind_arguments(
    params: list[Any] | dict[str, Any] | None,
    signature: ParameterSignature,
) -> BoundArguments:
    """Resolve supplied params against a signature.

    Args:
        params: Supplied values; None is treated as no values.
        signature: The target's declared parameters.

    Returns:
        BoundArguments to apply to the target.

    Raises:
        InvalidParams: On a count mismatch or a missing named argument.
    """
    if params is None:
        params = []

    count = len(params)
    if count < signature.required_count:
        raise InvalidParams("Wrong number of arguments")

    max_count = signature.max_count
    if max_count is not None and count > max_count:
        raise InvalidParams("Too many arguments")

    if is_positional(params):
        return _bind_positional(params, signature)

    return _bind_named(params, signature)


def _bind_named(params: dict[str, Any], signature: ParameterSignature) -> BoundArguments:
    bound = BoundArguments()

    for parameter in signature.parameters:
        if parameter.name in params:
            value = params[parameter.name]
        elif parameter.has_default:
            value = parameter.default
        else:
            logger.debug("Missing named argument: %s", parameter.name)
            raise InvalidParams(f"Missing argument: {parameter.name}")

        if parameter.positional_only:
            bound.args.append(value)
        else:
            bound.kwargs[parameter.name] = value

    return bound


def _bind_positional(values: list[Any], signature: ParameterSignature) -> BoundArguments:
    bound = BoundArguments()
    parameters = signature.parameters

    for index, value in enumerate(values):
        # Keyword-only parameters still follow declaration order; *args takes the rest
        if not signature.variadic and parameters[index].keyword_only:
            bound.kwargs[parameters[index].name] = value
        else:
            bound.args.append(value)

    for parameter in parameters:
        if parameter.keyword_only and not parameter.has_default and parameter.name not in bound.kwargs:
            logger.debug("Keyword-only argument not filled: %s", parameter.name)
            raise InvalidParams(f"Missing argument: {parameter.name}")

    return bound
