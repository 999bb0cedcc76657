"""Core building blocks shared across jsonproxy."""

from .errors import ProxyError, ProxyHostError, ProxyRequestError, ProxyResponseError
from .logging import get_logger, setup_logging


__all__ = [
    "ProxyError",
    "ProxyHostError",
    "ProxyRequestError",
    "ProxyResponseError",
    "get_logger",
    "setup_logging",
]
