"""ASGI application forwarding JSON requests to a backend service."""

import json
from typing import Any

from starlette.requests import Request
from starlette.responses import JSONResponse
from starlette.types import Receive, Scope, Send

from jsonproxy.core.logging import get_logger
from jsonproxy.proxy.config import ProxyConfig
from jsonproxy.proxy.executor import ErrorChannel, ProxyExecutor, raise_before_start
from jsonproxy.proxy.request import InboundContext
from jsonproxy.proxy.response import ProxyResponse


logger = get_logger(__name__)


class JSONProxy:
    """Proxy every HTTP request it receives to the configured host.

    Mount it under any prefix; the prefix is stripped from the forwarded path::

        app.mount("/api", JSONProxy(ProxyConfig(url_host="http://svc.internal")))

    Only JSON bodies are supported. Failures go to ``error_channel``; the
    default one re-raises into the host application while nothing has been
    sent to the caller.
    """

    def __init__(
        self,
        config: ProxyConfig,
        error_channel: ErrorChannel | None = None,
    ) -> None:
        self.config = config
        self.executor = ProxyExecutor(config)
        self.error_channel = error_channel or raise_before_start

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        """ASGI application entrypoint."""
        if scope["type"] != "http":
            logger.debug("proxy_scope_ignored", scope_type=scope["type"])
            return

        request = Request(scope, receive)
        try:
            body = await self._parse_body(request)
        except ValueError as e:
            logger.warning(
                "proxy_invalid_json_body",
                method=request.method,
                path=scope["path"],
                error=str(e),
            )
            invalid = JSONResponse(
                status_code=400,
                content={
                    "error": {
                        "type": "invalid_json",
                        "message": "Request body is not valid JSON",
                    }
                },
            )
            await invalid(scope, receive, send)
            return

        response = ProxyResponse(receive, send)
        inbound = InboundContext.from_request(request, body)
        await self.executor.execute(request, response, inbound, self.error_channel)

    @staticmethod
    async def _parse_body(request: Request) -> Any:
        """Parse the JSON body; an empty body is an empty object."""
        raw = await request.body()
        if not raw.strip():
            return {}
        return json.loads(raw)
