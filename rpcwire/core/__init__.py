"""Core error types."""

from rpcwire.core.errors import ConfigError, RpcWireError

__all__ = [
    "RpcWireError",
    "ConfigError",
]
