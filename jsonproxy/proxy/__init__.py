"""JSON request forwarding."""

from .app import JSONProxy
from .config import ProxyConfig, ProxyLogger, constant
from .curl import (
    CURL_HEADER,
    CURL_OMIT_HEADERS,
    MAX_HEADER_SIZE,
    TRUNCATED,
    build_curl_command,
    cap_header_value,
    curl_header_value,
    encode_uri,
)
from .events import ProxyEventEmitter, Stopwatch
from .executor import ProxyExecutor, ProxyOutcome, ProxyState, raise_before_start
from .host import resolve_host
from .request import (
    DEFAULT_HEADERS,
    ForwardDescriptor,
    InboundContext,
    build_forward_descriptor,
    merge_headers,
)
from .response import ProxyResponse


__all__ = [
    "CURL_HEADER",
    "CURL_OMIT_HEADERS",
    "DEFAULT_HEADERS",
    "MAX_HEADER_SIZE",
    "TRUNCATED",
    "ForwardDescriptor",
    "InboundContext",
    "JSONProxy",
    "ProxyConfig",
    "ProxyEventEmitter",
    "ProxyExecutor",
    "ProxyLogger",
    "ProxyOutcome",
    "ProxyResponse",
    "ProxyState",
    "Stopwatch",
    "build_curl_command",
    "build_forward_descriptor",
    "cap_header_value",
    "constant",
    "curl_header_value",
    "encode_uri",
    "merge_headers",
    "raise_before_start",
    "resolve_host",
]
