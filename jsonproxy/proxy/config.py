"""Per-mount proxy configuration."""

from collections.abc import Callable
from typing import Any, Protocol, runtime_checkable

from pydantic import BaseModel, ConfigDict, Field, field_validator


# Called with (request, response) for every inbound request
ContextCallable = Callable[[Any, Any], Any]


@runtime_checkable
class ProxyLogger(Protocol):
    """Logger capability used for proxy lifecycle events.

    Any structlog logger satisfies it; the proxy calls ``info``/``error``
    with an event message and keyword fields.
    """

    def info(self, event: str, **fields: Any) -> Any: ...

    def error(self, event: str, **fields: Any) -> Any: ...


def constant(value: Any) -> ContextCallable:
    """Lift a static value into a callable taking (request, response)."""

    def resolve(request: Any, response: Any) -> Any:
        return value

    return resolve


def _lift(value: Any) -> ContextCallable:
    return value if callable(value) else constant(value)


class ProxyConfig(BaseModel):
    """Immutable configuration shared by every request of one proxy mount.

    ``url_host``, ``headers`` and ``add_curl_header`` accept either a static
    value or a callable invoked with the request and response handles; static
    values are stored as constant callables.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    url_host: ContextCallable = Field(
        description="Destination host, or a callable returning it per request",
    )

    headers: ContextCallable = Field(
        default_factory=lambda: constant({}),
        description="Headers merged over the JSON defaults, or a callable returning them",
    )

    add_curl_header: ContextCallable = Field(
        default_factory=lambda: constant(False),
        description="Whether to expose the x-curl-command response header",
    )

    additional_log_message: str = Field(
        default="",
        description="Text appended to every proxy log line",
    )

    logger: Any = Field(
        default=None,
        description="Optional logger exposing info() and error()",
    )

    client_options: dict[str, Any] = Field(
        default_factory=dict,
        description="Keyword arguments for the outbound httpx.AsyncClient",
    )

    @field_validator("url_host", "add_curl_header", mode="before")
    @classmethod
    def lift_static_value(cls, v: Any) -> ContextCallable:
        """Store static values as constant callables."""
        return _lift(v)

    @field_validator("headers", mode="before")
    @classmethod
    def lift_static_headers(cls, v: Any) -> ContextCallable:
        """Store static headers (or None) as a constant callable."""
        if v is None:
            return constant({})
        return _lift(v)

    @field_validator("additional_log_message", mode="before")
    @classmethod
    def normalize_log_message(cls, v: Any) -> str:
        return v or ""

    @field_validator("logger")
    @classmethod
    def validate_logger(cls, v: Any) -> Any:
        """Require both logging capabilities up front."""
        if v is None:
            return v
        if not isinstance(v, ProxyLogger) or not (
            callable(v.info) and callable(v.error)
        ):
            raise ValueError("logger must expose callable info() and error() methods")
        return v

    def resolve_headers(self, request: Any, response: Any) -> dict[str, Any]:
        """Invoke the configured headers for one request."""
        return dict(self.headers(request, response) or {})

    def should_add_curl_header(self, request: Any, response: Any) -> bool:
        return bool(self.add_curl_header(request, response))
