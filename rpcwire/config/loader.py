"""Configuration loading with fail-fast behavior.

Config files are plain JSON objects matching ClientConfig or ServerConfig.
An empty file means "all defaults"; any other problem raises ConfigError.
"""

from __future__ import annotations

import importlib
import json
import logging
from pathlib import Path
from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

from rpcwire.config.schema import ClientConfig, ServerConfig
from rpcwire.core.errors import ConfigError

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


def read_config_file(path: Path) -> dict[str, Any]:
    """Read the JSON object held in a config file; a blank file reads as {}.

    Raises:
        ConfigError: If the file cannot be read, is not JSON, or holds
            something other than an object.
    """
    try:
        text = path.read_text(encoding="utf-8-sig")
    except FileNotFoundError as e:
        raise ConfigError(f"Config file not found: {path}") from e
    except OSError as e:
        raise ConfigError(f"Cannot read config file {path}: {e}") from e

    if not text.strip():
        return {}

    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise ConfigError(f"{path} is not valid JSON: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"{path} must hold a JSON object, not {type(data).__name__}")
    return data


def load_config(model: type[ModelT], path: Path) -> ModelT:
    """Read ``path`` and validate it against ``model``.

    Raises:
        ConfigError: If reading or validation fails.
    """
    logger.debug("Loading %s from %s", model.__name__, path)
    try:
        return model.model_validate(read_config_file(path))
    except ValidationError as e:
        raise ConfigError(f"Invalid {model.__name__} in {path}: {e}") from e


def load_client_config(path: Path) -> ClientConfig:
    return load_config(ClientConfig, path)


def load_server_config(path: Path) -> ServerConfig:
    return load_config(ServerConfig, path)


def import_exception(path: str) -> type[BaseException]:
    """Resolve a dotted path like ``package.module.ClassName`` to an exception class.

    Raises:
        ConfigError: If the module or attribute is missing, or the attribute
            is not an exception class.
    """
    module_name, _, attr = path.rpartition(".")
    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise ConfigError(f"Cannot import module for {path!r}: {e}") from e

    exc_type = getattr(module, attr, None)
    if not isinstance(exc_type, type) or not issubclass(exc_type, BaseException):
        raise ConfigError(f"{path!r} is not an exception class")
    return exc_type
