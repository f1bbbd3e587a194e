"""Typed exception hierarchy for rpcwire."""

from __future__ import annotations


class RpcWireError(Exception):
    """Base class for all rpcwire errors."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class ConfigError(RpcWireError):
    """Raised for configuration issues (missing file, invalid JSON, validation failure)."""
