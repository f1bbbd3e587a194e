"""Unit tests for procedure resolution, hooks and error relay in Server."""

import json

import pytest

from rpcwire.config.schema import ServerConfig
from rpcwire.core.errors import ConfigError
from rpcwire.rpc.dispatch_core import Credentials
from rpcwire.rpc.errors import (
    AccessDenied,
    ApplicationError,
    AuthenticationFailure,
    InvalidParams,
    MethodNotFound,
)
from rpcwire.rpc.server import Server


class QuotaExceeded(Exception):
    """Allow-listed application exception carrying a code."""

    code = 4029


class Single:
    def get_all(self, p1):
        return p1 + 2


class TestExecuteProcedure:
    """Tests for direct procedure resolution and invocation."""

    def test_procedure_not_found(self):
        """An empty server has no procedures."""
        with pytest.raises(MethodNotFound):
            Server().execute_procedure("a")

    def test_callback_not_found(self):
        """Only the registered name resolves."""
        srv = Server()
        srv.register("b", lambda: None)
        with pytest.raises(MethodNotFound):
            srv.execute_procedure("a")

    def test_method_not_found_on_bound_class(self, calculator_cls):
        """A binding to a method the class lacks does not resolve."""
        srv = Server()
        srv.bind("getAllTasks", calculator_cls, "get_nothing")
        with pytest.raises(MethodNotFound):
            srv.execute_procedure("getAllTasks")

    def test_bind_named_arguments(self, calculator_cls):
        """Bound methods accept named params with defaults."""
        srv = Server()
        srv.bind("getAllA", calculator_cls, "get_all")
        srv.bind("getAllB", Single, "get_all")
        srv.bind("getAllC", Single(), "get_all")

        assert srv.execute_procedure("getAllA", {"p2": 4, "p1": -2}) == 6
        assert srv.execute_procedure("getAllA", {"p2": 4, "p3": 8, "p1": -2}) == 10
        assert srv.execute_procedure("getAllB", {"p1": 4}) == 6
        assert srv.execute_procedure("getAllC", {"p1": 3}) == 5

    def test_bind_positional_arguments(self, calculator_cls):
        """Bound methods accept positional params."""
        srv = Server()
        srv.bind("getAllA", calculator_cls, "get_all")
        srv.bind("getAllB", Single, "get_all")

        assert srv.execute_procedure("getAllA", [4, -2]) == 6
        assert srv.execute_procedure("getAllA", [4, 0, -2]) == 2
        assert srv.execute_procedure("getAllB", [2]) == 4

    def test_bind_defaults_method_to_procedure_name(self, calculator_cls):
        """bind() without a method name uses the procedure name."""
        srv = Server()
        srv.bind("add", calculator_cls)
        assert srv.execute_procedure("add", [1, 2]) == 3

    def test_register_named_and_positional(self):
        """Callbacks accept both param styles."""
        srv = Server()
        srv.register("getAllA", lambda p1, p2, p3=4: p1 + p2 + p3)

        assert srv.execute_procedure("getAllA", {"p2": 4, "p1": -2}) == 6
        assert srv.execute_procedure("getAllA", {"p2": 4, "p3": 8, "p1": -2}) == 10
        assert srv.execute_procedure("getAllA", [4, -2]) == 6
        assert srv.execute_procedure("getAllA", [4, 0, -2]) == 2

    def test_too_many_arguments(self):
        """Extra values fail with InvalidParams."""
        srv = Server()
        srv.bind("getAllC", Single(), "get_all")
        with pytest.raises(InvalidParams):
            srv.execute_procedure("getAllC", {"p1": 3, "p2": 5})

    def test_not_enough_arguments(self):
        """Missing values fail with InvalidParams."""
        srv = Server()
        srv.bind("getAllC", Single(), "get_all")
        with pytest.raises(InvalidParams):
            srv.execute_procedure("getAllC")

    def test_procedure_decorator(self):
        """The decorator registers under the function name or an alias."""
        srv = Server()

        @srv.procedure()
        def multiply(a, b):
            return a * b

        @srv.procedure("math.neg")
        def negate(value):
            return -value

        assert srv.execute_procedure("multiply", [3, 4]) == 12
        assert srv.execute_procedure("math.neg", [5]) == -5
        assert multiply(2, 2) == 4


class TestResolutionOrder:
    """Tests for callback > bound class > attached instance ordering."""

    def test_callback_wins_over_attached_instance(self, calculator_cls):
        """A registered callback shadows an attached method of the same name."""
        srv = Server()
        srv.attach(calculator_cls())
        srv.register("add", lambda a, b: "callback")
        assert srv.execute_procedure("add", [1, 2]) == "callback"

    def test_bound_class_wins_over_attached_instance(self, calculator_cls):
        """An explicit binding shadows attached instances."""
        srv = Server()
        srv.attach(calculator_cls())
        srv.bind("add", Single, "get_all")
        assert srv.execute_procedure("add", [1]) == 3

    def test_first_attached_instance_wins(self):
        """Instances are searched in attachment order."""

        class First:
            def name(self):
                return "first"

        class Second:
            def name(self):
                return "second"

        srv = Server()
        srv.attach(First())
        srv.attach(Second())
        assert srv.execute_procedure("name") == "first"

    def test_private_methods_are_not_exposed(self, calculator_cls, decode):
        """Underscore methods of attached instances never resolve."""
        srv = Server()
        srv.attach(calculator_cls())

        reply = srv.execute('{"jsonrpc": "2.0", "method": "_hidden", "id": 1}')
        assert decode(reply.body)["error"]["code"] == -32601

    def test_bound_class_is_instantiated_per_call(self):
        """Class targets get a fresh instance for every call."""

        class Counter:
            def __init__(self):
                self.count = 0

            def bump(self):
                self.count += 1
                return self.count

        srv = Server()
        srv.bind("bump", Counter)
        assert srv.execute_procedure("bump") == 1
        assert srv.execute_procedure("bump") == 1

    def test_attached_instance_keeps_state(self):
        """Attached instances are shared between calls."""

        class Counter:
            def __init__(self):
                self.count = 0

            def bump(self):
                self.count += 1
                return self.count

        srv = Server()
        srv.attach(Counter())
        assert srv.execute_procedure("bump") == 1
        assert srv.execute_procedure("bump") == 2


class TestBeforeHook:
    """Tests for the before-hook."""

    def test_callable_hook_receives_credentials_and_target(self, calculator_cls):
        """The hook sees username, password, class name and method name."""
        seen = []
        srv = Server()
        srv.before(lambda *args: seen.append(args))
        srv.attach(calculator_cls())

        result = srv.execute_procedure("add", [1, 2], Credentials("alice", "secret"))

        assert result == 3
        assert seen == [("alice", "secret", "Calculator", "add")]

    def test_hook_result_is_ignored(self, calculator_cls):
        """A falsy hook result does not stop dispatch."""
        srv = Server()
        srv.before(lambda *args: False)
        srv.attach(calculator_cls())
        assert srv.execute_procedure("add", [2, 2]) == 4

    def test_hook_not_called_for_callbacks(self):
        """Free callbacks bypass the hook."""
        seen = []
        srv = Server()
        srv.before(lambda *args: seen.append(args))
        srv.register("ping", lambda: "pong")

        assert srv.execute_procedure("ping") == "pong"
        assert seen == []

    def test_method_name_hook(self):
        """A string hook is looked up on the target instance."""

        class Guarded:
            def __init__(self):
                self.checked = []

            def check(self, username, password, class_name, method):
                self.checked.append((username, class_name, method))

            def work(self):
                return "done"

        guarded = Guarded()
        srv = Server()
        srv.before("check")
        srv.attach(guarded)

        assert srv.execute_procedure("work", credentials=Credentials("bob", "pw")) == "done"
        assert guarded.checked == [("bob", "Guarded", "work")]

    def test_method_name_hook_missing_on_instance_is_skipped(self, calculator_cls):
        """A string hook the instance lacks is ignored."""
        srv = Server()
        srv.before("check")
        srv.attach(calculator_cls())
        assert srv.execute_procedure("add", [1, 1]) == 2

    def test_hook_authentication_failure_rejects_request(self, calculator_cls):
        """AuthenticationFailure from the hook becomes a 401 reply."""

        def hook(username, password, class_name, method):
            if username != "admin":
                raise AuthenticationFailure("bad credentials")

        srv = Server()
        srv.before(hook)
        srv.attach(calculator_cls())

        reply = srv.execute('{"jsonrpc": "2.0", "method": "add", "params": [1, 2], "id": 1}')

        assert reply.rejected
        assert reply.status == 401
        assert json.loads(reply.body) == {"error": "Authentication failed"}
        assert reply.headers["WWW-Authenticate"].startswith("Basic realm=")

        ok = srv.execute(
            '{"jsonrpc": "2.0", "method": "add", "params": [1, 2], "id": 1}',
            Credentials("admin", "x"),
        )
        assert not ok.rejected
        assert json.loads(ok.body)["result"] == 3

    def test_access_denied_rejects_whole_batch(self):
        """AccessDenied in any batch item rejects the whole payload."""

        def forbidden():
            raise AccessDenied("nope")

        srv = Server()
        srv.register("ok", lambda: 1)
        srv.register("forbidden", forbidden)

        reply = srv.execute(
            '[{"jsonrpc": "2.0", "method": "ok", "id": 1},'
            ' {"jsonrpc": "2.0", "method": "forbidden", "id": 2}]'
        )

        assert reply.status == 403
        assert json.loads(reply.body) == {"error": "Access Forbidden"}


class TestErrorRelay:
    """Tests for application errors and the relay allow-list."""

    def test_application_error_is_relayed(self, decode):
        """ApplicationError keeps its code, message and data."""

        def fail():
            raise ApplicationError("Quota exceeded", 42, {"limit": 10})

        srv = Server()
        srv.register("fail", fail)

        reply = srv.execute('{"jsonrpc": "2.0", "method": "fail", "id": 1}')
        assert decode(reply.body) == {
            "jsonrpc": "2.0",
            "id": 1,
            "error": {"code": 42, "message": "Quota exceeded", "data": {"limit": 10}},
        }

    def test_unlisted_exception_propagates(self):
        """Exceptions not allow-listed escape the server."""

        def fail():
            raise RuntimeError("internal detail")

        srv = Server()
        srv.register("fail", fail)

        with pytest.raises(RuntimeError, match="internal detail"):
            srv.execute('{"jsonrpc": "2.0", "method": "fail", "id": 1}')

    def test_attached_exception_is_relayed(self, decode):
        """An allow-listed exception is relayed with its code attribute."""

        def fail():
            raise QuotaExceeded("Too many calls")

        srv = Server()
        srv.attach_exception(QuotaExceeded)
        srv.register("fail", fail)

        reply = srv.execute('{"jsonrpc": "2.0", "method": "fail", "id": 1}')
        assert decode(reply.body)["error"] == {"code": 4029, "message": "Too many calls"}

    def test_attach_exception_defaults_to_all(self, decode):
        """attach_exception() with no argument relays any Exception, code 0."""

        def fail():
            raise ValueError("bad value")

        srv = Server()
        srv.attach_exception()
        srv.register("fail", fail)

        reply = srv.execute('{"jsonrpc": "2.0", "method": "fail", "id": 1}')
        assert decode(reply.body)["error"] == {"code": 0, "message": "bad value"}

    def test_relayed_error_on_notification_is_silent(self):
        """Notifications never get error responses."""

        def fail():
            raise ApplicationError("boom", 1)

        srv = Server()
        srv.register("fail", fail)
        assert srv.execute('{"jsonrpc": "2.0", "method": "fail"}').body == ""


class TestServerFromConfig:
    """Tests for Server.from_config()."""

    def test_from_config_resolves_relay_exceptions(self, decode):
        """Dotted exception paths are imported and relayed."""
        config = ServerConfig(relay_exceptions=["builtins.KeyError"])
        srv = Server.from_config(config)

        def fail():
            raise KeyError("missing")

        srv.register("fail", fail)
        reply = srv.execute('{"jsonrpc": "2.0", "method": "fail", "id": 1}')
        assert decode(reply.body)["error"]["code"] == 0

    def test_from_config_sets_before_hook(self):
        """The configured hook name is used as a method-name hook."""
        srv = Server.from_config(ServerConfig(before="audit"))
        assert srv.options.before == "audit"

    def test_from_config_unknown_exception_raises_config_error(self):
        """An unimportable exception path is a configuration error."""
        with pytest.raises(ConfigError):
            Server.from_config(ServerConfig(relay_exceptions=["no_such_module_xyz.Error"]))
