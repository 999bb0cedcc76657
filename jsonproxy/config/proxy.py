"""Proxy forwarding configuration settings."""

from pydantic import BaseModel, Field, field_validator


class ProxySettings(BaseModel):
    """Settings for the proxy mounted by the bundled server.

    Only static values can be expressed here; per-request callables are
    available when building ``ProxyConfig`` in code.
    """

    url_host: str | None = Field(
        default=None,
        description="Destination host requests are forwarded to, e.g. http://svc.internal",
    )

    headers: dict[str, str] = Field(
        default_factory=dict,
        description="Headers merged over the default JSON headers",
    )

    add_curl_header: bool = Field(
        default=False,
        description="Expose the outbound request as an x-curl-command response header",
    )

    additional_log_message: str = Field(
        default="",
        description="Text appended to every proxy log line",
    )

    mount_path: str = Field(
        default="/",
        description="Path prefix the proxy is mounted under",
    )

    timeout: float = Field(
        default=120.0,
        description="Outbound request timeout in seconds",
        gt=0,
    )

    verify: bool = Field(
        default=True,
        description="Verify TLS certificates of the destination host",
    )

    @field_validator("mount_path")
    @classmethod
    def normalize_mount_path(cls, v: str) -> str:
        """Ensure a leading slash and no trailing slash (except for root)."""
        return "/" + v.strip("/")
