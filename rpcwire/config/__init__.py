"""Configuration loading and validation."""

from rpcwire.config.loader import (
    import_exception,
    load_client_config,
    load_config,
    load_server_config,
    read_config_file,
)
from rpcwire.config.schema import ClientConfig, ServerConfig

__all__ = [
    "ClientConfig",
    "ServerConfig",
    "import_exception",
    "load_client_config",
    "load_config",
    "load_server_config",
    "read_config_file",
]
