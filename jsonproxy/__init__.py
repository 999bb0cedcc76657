"""jsonproxy - forward JSON requests to a backend service over HTTP."""

from ._version import __version__
from .core.errors import (
    ProxyError,
    ProxyHostError,
    ProxyRequestError,
    ProxyResponseError,
)
from .proxy import JSONProxy, ProxyConfig


__all__ = [
    "__version__",
    "JSONProxy",
    "ProxyConfig",
    "ProxyError",
    "ProxyHostError",
    "ProxyRequestError",
    "ProxyResponseError",
]
