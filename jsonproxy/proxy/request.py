"""Inbound request view and the outbound forward descriptor."""

import json
import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from starlette.requests import Request


# By default only JSON is proxied
DEFAULT_HEADERS: dict[str, str] = {
    "Accept": "application/json",
    "Content-Type": "application/json",
}

# Paired surrogates are already combined by json.loads
_LONE_SURROGATE = re.compile("[\ud800-\udfff]")


@dataclass(frozen=True)
class InboundContext:
    """Read-only view of the inbound request.

    ``original_url`` is the path and query string as received, ``base_url``
    the prefix the proxy is mounted under.
    """

    method: str
    original_url: str
    base_url: str = ""
    body: Any = field(default_factory=dict)
    transport_options: Mapping[str, Any] = field(default_factory=dict)

    @property
    def url_path(self) -> str:
        """Original URL with the mount prefix stripped."""
        if not self.base_url:
            return self.original_url
        return self.original_url.replace(self.base_url, "", 1)

    @classmethod
    def from_request(cls, request: Request, body: Any) -> "InboundContext":
        scope = request.scope
        raw_path = scope.get("raw_path")
        # Some servers leave the query string on raw_path
        if raw_path:
            path = raw_path.split(b"?", 1)[0].decode("latin-1")
        else:
            path = scope["path"]
        query_string = scope.get("query_string", b"")
        if query_string:
            path = f"{path}?{query_string.decode('latin-1')}"

        transport_options = getattr(request.state, "transport_options", None) or {}

        return cls(
            method=request.method,
            original_url=path,
            base_url=scope.get("root_path", ""),
            body=body,
            transport_options=dict(transport_options),
        )


@dataclass(frozen=True)
class ForwardDescriptor:
    """Fully assembled outbound request."""

    host: str
    url_path: str
    method: str
    headers: dict[str, Any]
    body: str
    options: dict[str, Any] = field(default_factory=dict)

    @property
    def url(self) -> str:
        return f"{self.host}{self.url_path}"


def merge_headers(configured: Mapping[str, Any] | None) -> dict[str, str]:
    """Merge configured headers over the JSON defaults; configured values win.

    Values are sent as text; ``None`` values are left out.
    """
    merged = {**DEFAULT_HEADERS, **(configured or {})}
    return {key: str(value) for key, value in merged.items() if value is not None}


def serialize_body(body: Any) -> str:
    """Serialize a parsed JSON body to compact JSON text.

    Non-ASCII characters are kept, except lone surrogates, which cannot be
    encoded as UTF-8 and are written as ``\\uXXXX`` escapes instead.
    """
    text = json.dumps(body, separators=(",", ":"), ensure_ascii=False)
    return _LONE_SURROGATE.sub(lambda m: f"\\u{ord(m.group()):04x}", text)


def build_forward_descriptor(
    host: str,
    inbound: InboundContext,
    headers: Mapping[str, Any],
) -> ForwardDescriptor:
    """Assemble the outbound request for a resolved host.

    Args:
        host: Resolved destination host
        inbound: The inbound request view
        headers: Already merged outbound headers

    Returns:
        ForwardDescriptor whose url is host + inbound path
    """
    return ForwardDescriptor(
        host=host,
        url_path=inbound.url_path,
        method=inbound.method,
        headers=dict(headers),
        body=serialize_body(inbound.body),
        options=dict(inbound.transport_options),
    )
