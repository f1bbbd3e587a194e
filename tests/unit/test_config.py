"""Tests for config loading and validation."""

import json
from pathlib import Path

import pytest
from pydantic import ValidationError

from rpcwire.config import (
    ClientConfig,
    ServerConfig,
    import_exception,
    load_client_config,
    load_config,
    load_server_config,
    read_config_file,
)
from rpcwire.core.errors import ConfigError
from rpcwire.rpc.errors import ApplicationError


def write(path: Path, data) -> Path:
    path.write_text(data if isinstance(data, str) else json.dumps(data), encoding="utf-8")
    return path


class TestReadConfigFile:
    """Tests for read_config_file()."""

    def test_loads_object(self, tmp_path):
        path = write(tmp_path / "c.json", {"url": "http://x"})
        assert read_config_file(path) == {"url": "http://x"}

    def test_empty_file_is_empty_dict(self, tmp_path):
        path = write(tmp_path / "c.json", "   \n")
        assert read_config_file(path) == {}

    def test_utf8_bom_is_accepted(self, tmp_path):
        path = tmp_path / "c.json"
        path.write_bytes(b"\xef\xbb\xbf" + b'{"a": 1}')
        assert read_config_file(path) == {"a": 1}

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigError, match="Config file not found"):
            read_config_file(tmp_path / "nope.json")

    def test_invalid_json(self, tmp_path):
        path = write(tmp_path / "c.json", "{not json")
        with pytest.raises(ConfigError, match="is not valid JSON"):
            read_config_file(path)

    def test_non_object(self, tmp_path):
        path = write(tmp_path / "c.json", [1, 2])
        with pytest.raises(ConfigError, match="must hold a JSON object"):
            read_config_file(path)

    def test_directory_is_unreadable(self, tmp_path):
        with pytest.raises(ConfigError):
            read_config_file(tmp_path)

    def test_load_config_validates_against_model(self, tmp_path):
        path = write(tmp_path / "server.json", {"before": "audit"})
        assert load_config(ServerConfig, path).before == "audit"

        write(path, {"before": "audit", "extra": 1})
        with pytest.raises(ConfigError, match="Invalid ServerConfig"):
            load_config(ServerConfig, path)


class TestClientConfig:
    """Tests for ClientConfig."""

    def test_defaults(self):
        config = ClientConfig(url="http://localhost/rpc")
        assert config.timeout == 3.0
        assert config.headers == {}
        assert config.named_arguments is True
        assert config.verify_ssl is True
        assert config.max_redirects == 2

    def test_url_is_stripped(self):
        assert ClientConfig(url="  https://h/rpc ").url == "https://h/rpc"

    @pytest.mark.parametrize(
        "data",
        [
            {},
            {"url": "ftp://h/rpc"},
            {"url": "http://h", "timeout": 0},
            {"url": "http://h", "max_redirects": -1},
            {"url": "http://h", "unknown": True},
        ],
    )
    def test_invalid(self, data):
        with pytest.raises(ValidationError):
            ClientConfig.model_validate(data)

    def test_load_client_config(self, tmp_path):
        path = write(tmp_path / "client.json", {"url": "http://h/rpc", "timeout": 5})
        config = load_client_config(path)
        assert config.url == "http://h/rpc"
        assert config.timeout == 5

    def test_load_client_config_validation_error(self, tmp_path):
        path = write(tmp_path / "client.json", {"url": "nope"})
        with pytest.raises(ConfigError, match="Invalid ClientConfig"):
            load_client_config(path)


class TestServerConfig:
    """Tests for ServerConfig and import_exception()."""

    def test_empty_file_gives_defaults(self, tmp_path):
        config = load_server_config(write(tmp_path / "server.json", ""))
        assert config == ServerConfig()
        assert config.before is None
        assert config.relay_exceptions == []

    def test_relay_paths_must_be_dotted(self):
        with pytest.raises(ValidationError):
            ServerConfig(relay_exceptions=["ValueError"])

    def test_load_server_config(self, tmp_path):
        path = write(
            tmp_path / "server.json",
            {"before": "check", "relay_exceptions": ["builtins.LookupError"]},
        )
        config = load_server_config(path)
        assert config.before == "check"
        assert config.relay_exceptions == ["builtins.LookupError"]

    def test_import_exception(self):
        assert import_exception("builtins.KeyError") is KeyError
        assert import_exception("rpcwire.rpc.errors.ApplicationError") is ApplicationError

    def test_import_exception_missing_module(self):
        with pytest.raises(ConfigError, match="Cannot import module"):
            import_exception("no_such_module_xyz.Error")

    @pytest.mark.parametrize("path", ["builtins.len", "builtins.NoSuchThing", "json.JSONDecoder"])
    def test_import_exception_not_an_exception(self, path):
        with pytest.raises(ConfigError, match="not an exception class"):
            import_exception(path)
