"""Single-hop forwarding of one inbound request."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from enum import Enum

import httpx
from starlette.requests import ClientDisconnect, Request

from jsonproxy.core.errors import (
    ProxyError,
    ProxyHostError,
    ProxyRequestError,
    ProxyResponseError,
)
from jsonproxy.core.logging import get_logger
from jsonproxy.proxy.config import ProxyConfig
from jsonproxy.proxy.curl import CURL_HEADER, curl_header_value
from jsonproxy.proxy.events import ProxyEventEmitter, Stopwatch
from jsonproxy.proxy.host import resolve_host
from jsonproxy.proxy.request import (
    ForwardDescriptor,
    InboundContext,
    build_forward_descriptor,
    merge_headers,
)
from jsonproxy.proxy.response import ProxyResponse


logger = get_logger(__name__)

ErrorChannel = Callable[[ProxyError, ProxyResponse], Awaitable[None]]

# Failures of the outbound call itself, including requests httpx cannot encode
REQUEST_ERRORS: tuple[type[Exception], ...] = (
    httpx.HTTPError,
    httpx.InvalidURL,
    TypeError,
    ValueError,
)

# Failures while relaying bytes back to the caller
RESPONSE_ERRORS: tuple[type[Exception], ...] = (
    httpx.HTTPError,
    ClientDisconnect,
    OSError,
)


class ProxyState(str, Enum):
    """Lifecycle states of one forwarded request."""

    RESOLVING_HOST = "resolving_host"
    BUILDING_REQUEST = "building_request"
    STREAMING = "streaming"
    HOST_ERROR = "host_error"
    REQUEST_ERROR = "request_error"
    RESPONSE_ERROR = "response_error"
    COMPLETE = "complete"


@dataclass
class ProxyOutcome:
    """Terminal state of one forwarded request."""

    state: ProxyState
    descriptor: ForwardDescriptor | None = None
    error: ProxyError | None = None
    duration_ms: float | None = None


class ProxyExecutor:
    """Resolve, build, send and relay one request against the configured host.

    Every failure is converted to a ``ProxyError`` kind and handed to the
    error channel exactly once; a successful relay emits the end event
    instead. Nothing is retried.
    """

    def __init__(self, config: ProxyConfig) -> None:
        self.config = config
        self.events = ProxyEventEmitter(config.logger, config.additional_log_message)

    async def execute(
        self,
        request: Request,
        response: ProxyResponse,
        inbound: InboundContext,
        on_error: ErrorChannel,
    ) -> ProxyOutcome:
        """Forward ``inbound`` and relay the upstream response.

        Args:
            request: Request handle passed to configured callables
            response: Response handle used for headers and the relay
            inbound: Parsed view of the inbound request
            on_error: Error channel receiving the single failure, if any

        Returns:
            ProxyOutcome describing the terminal state
        """
        config = self.config

        logger.debug(
            "proxy_request_received",
            method=inbound.method,
            url_path=inbound.url_path,
            state=ProxyState.RESOLVING_HOST,
        )
        try:
            host = resolve_host(config, request, response, inbound)
        except ProxyHostError as e:
            self.events.host_error(e.host, e.url_path)
            await on_error(e, response)
            return ProxyOutcome(state=ProxyState.HOST_ERROR, error=e)

        logger.debug(
            "proxy_host_resolved", host=host, state=ProxyState.BUILDING_REQUEST
        )
        headers = merge_headers(config.resolve_headers(request, response))
        descriptor = build_forward_descriptor(host, inbound, headers)

        self.events.start(
            host=host,
            url_path=descriptor.url_path,
            headers=headers,
            url=descriptor.url,
            body=inbound.body,
        )
        stopwatch = Stopwatch()
        add_curl_header = config.should_add_curl_header(request, response)

        try:
            if add_curl_header:
                response.set_header(CURL_HEADER, curl_header_value(descriptor))
            client = httpx.AsyncClient(
                **{**config.client_options, **descriptor.options}
            )
        except REQUEST_ERRORS as e:
            return await self._request_failed(
                descriptor, response, inbound, e, on_error
            )

        try:
            return await self._stream(
                client, descriptor, response, inbound, stopwatch, on_error
            )
        finally:
            await client.aclose()

    async def _request_failed(
        self,
        descriptor: ForwardDescriptor,
        response: ProxyResponse,
        inbound: InboundContext,
        cause: Exception,
        on_error: ErrorChannel,
    ) -> ProxyOutcome:
        error = self._forward_error(ProxyRequestError, descriptor, inbound, cause)
        self.events.request_error(descriptor.host, descriptor.url_path)
        await on_error(error, response)
        return ProxyOutcome(
            state=ProxyState.REQUEST_ERROR, descriptor=descriptor, error=error
        )

    async def _stream(
        self,
        client: httpx.AsyncClient,
        descriptor: ForwardDescriptor,
        response: ProxyResponse,
        inbound: InboundContext,
        stopwatch: Stopwatch,
        on_error: ErrorChannel,
    ) -> ProxyOutcome:
        try:
            outbound = client.build_request(
                method=descriptor.method,
                url=descriptor.url,
                headers=descriptor.headers,
                content=descriptor.body,
            )
            logger.debug(
                "proxy_request_sending",
                state=ProxyState.STREAMING,
                method=descriptor.method,
                url=descriptor.url,
                body_size=len(descriptor.body),
            )
            upstream = await client.send(outbound, stream=True)
        except REQUEST_ERRORS as e:
            return await self._request_failed(
                descriptor, response, inbound, e, on_error
            )

        logger.debug(
            "proxy_upstream_response",
            url=descriptor.url,
            status_code=upstream.status_code,
        )

        try:
            await response.relay(
                upstream.status_code, upstream.headers.raw, upstream.aiter_raw()
            )
        except RESPONSE_ERRORS as e:
            error = self._forward_error(ProxyResponseError, descriptor, inbound, e)
            self.events.response_error(descriptor.host, descriptor.url_path)
            await on_error(error, response)
            return ProxyOutcome(
                state=ProxyState.RESPONSE_ERROR, descriptor=descriptor, error=error
            )
        finally:
            await upstream.aclose()

        duration_ms = stopwatch.elapsed_ms()
        self.events.end(descriptor.host, descriptor.url_path, duration_ms)
        return ProxyOutcome(
            state=ProxyState.COMPLETE, descriptor=descriptor, duration_ms=duration_ms
        )

    def _forward_error(
        self,
        error_class: type[ProxyRequestError] | type[ProxyResponseError],
        descriptor: ForwardDescriptor,
        inbound: InboundContext,
        cause: BaseException,
    ) -> ProxyError:
        return error_class(
            host=descriptor.host,
            url_path=descriptor.url_path,
            cause=cause,
            body=inbound.body,
            additional_log_message=self.config.additional_log_message,
        )


async def raise_before_start(error: ProxyError, response: ProxyResponse) -> None:
    """Default error channel.

    Hands the error to the host application's exception handlers while nothing
    has been sent; once the response has started it can only be logged.
    """
    if not response.started:
        raise error
    logger.error(
        "proxy_error_after_response_started",
        error_type=error.name,
        error_message=str(error),
        detail=error.detail,
        exc_info=error,
    )
