"""Destination host resolution."""

from typing import Any

from jsonproxy.core.errors import ProxyHostError
from jsonproxy.proxy.config import ProxyConfig
from jsonproxy.proxy.request import InboundContext


def resolve_host(
    config: ProxyConfig,
    request: Any,
    response: Any,
    inbound: InboundContext,
) -> str:
    """Resolve the destination host for one request.

    Raises:
        ProxyHostError: If the configured value (or the value returned by the
            configured callable) is not a string
    """
    host = config.url_host(request, response)
    if not isinstance(host, str):
        raise ProxyHostError(
            host=host,
            url_path=inbound.url_path,
            body=inbound.body,
            additional_log_message=config.additional_log_message,
        )
    return host
