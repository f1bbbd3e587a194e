"""Shared pytest fixtures for the rpcwire test suite."""

import json
from collections.abc import Callable
from typing import Any

import httpx
import pytest

from rpcwire.client import Client
from rpcwire.rpc.server import Server
from rpcwire.rpc.transport import HttpTransport


class Calculator:
    """Attached/bound target used across server tests."""

    def __init__(self) -> None:
        self.calls: list[str] = []

    def add(self, a, b):
        return a + b

    def get_all(self, p1, p2, p3=4):
        return p1 + p2 + p3

    def do_something(self):
        return "something"

    def _hidden(self):
        return "never exposed"


@pytest.fixture
def server() -> Server:
    """Server with the subtract/sum/get_data procedures registered."""
    srv = Server()
    srv.register("subtract", lambda minuend, subtrahend: minuend - subtrahend)
    srv.register("sum", lambda a, b, c: a + b + c)
    srv.register("get_data", lambda: ["hello", 5])
    srv.register("notify_hello", lambda value: None)
    return srv


@pytest.fixture
def decode() -> Callable[[str], Any]:
    """Decode a reply body, treating the empty body as None."""

    def _decode(body: str) -> Any:
        return json.loads(body) if body else None

    return _decode


@pytest.fixture
def calculator_cls() -> type[Calculator]:
    """The Calculator class, for bind() and attach() tests."""
    return Calculator


@pytest.fixture
def make_client() -> Callable[..., Client]:
    """Factory building a Client whose HTTP traffic goes to a handler function."""

    def _make(handler: Callable[[httpx.Request], httpx.Response], **kwargs: Any) -> Client:
        url = kwargs.pop("url", "http://localhost/jsonrpc")
        transport = HttpTransport(url, transport=httpx.MockTransport(handler))
        return Client(url, transport=transport, **kwargs)

    return _make


@pytest.fixture
def server_handler() -> Callable[[Server], Callable[[httpx.Request], httpx.Response]]:
    """Factory turning a Server into an httpx handler."""

    def _wrap(srv: Server) -> Callable[[httpx.Request], httpx.Response]:
        def handler(request: httpx.Request) -> httpx.Response:
            reply = srv.execute(request.content)
            return httpx.Response(
                reply.status, content=reply.body.encode(), headers=reply.headers
            )

        return handler

    return _wrap
