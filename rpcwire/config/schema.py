"""Pydantic models for rpcwire configuration validation."""

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ClientConfig(BaseModel):
    """Configuration for a JSON-RPC client.

    Example in client.json:
        {
            "url": "https://example.org/jsonrpc",
            "timeout": 5,
            "headers": {"X-Trace": "on"}
        }
    """

    model_config = ConfigDict(extra="forbid")

    url: str
    """Server endpoint the requests are POSTed to."""

    timeout: float = Field(default=3.0, gt=0)
    """Transport timeout in seconds."""

    headers: dict[str, str] = Field(default_factory=dict)
    """Extra HTTP headers, merged over the default ones."""

    named_arguments: bool = True
    """Send a single mapping argument as named params."""

    verify_ssl: bool = True
    """Verify the server's TLS certificate."""

    max_redirects: int = Field(default=2, ge=0)
    """Redirects the transport follows before failing."""

    @field_validator("url")
    @classmethod
    def url_must_be_http(cls, v: str) -> str:
        """Validate that the endpoint is an http(s) URL."""
        v = v.strip()
        if not v.startswith(("http://", "https://")):
            raise ValueError(f"url must start with http:// or https://, got: {v!r}")
        return v


class ServerConfig(BaseModel):
    """Configuration for a JSON-RPC server.

    Example in server.json:
        {
            "before": "check_access",
            "relay_exceptions": ["myapp.errors.QuotaExceeded"]
        }
    """

    model_config = ConfigDict(extra="forbid")

    before: str | None = None
    """Name of a method called on the target instance before each method call."""

    relay_exceptions: list[str] = Field(default_factory=list)
    """Dotted paths of exception classes relayed to clients as JSON-RPC errors."""

    @field_validator("relay_exceptions")
    @classmethod
    def paths_must_be_dotted(cls, v: list[str]) -> list[str]:
        """Validate that each entry looks like module.ClassName."""
        for path in v:
            module, _, name = path.rpartition(".")
            if not module or not name:
                raise ValueError(f"relay_exceptions entries must be dotted paths, got: {path!r}")
        return v
