"""rpcwire: JSON-RPC 2.0 client and server core."""

from rpcwire.client import Client
from rpcwire.rpc.server import Server

__version__ = "0.1.0"

__all__ = ["Client", "Server", "__version__"]
