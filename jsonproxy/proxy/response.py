"""Response handle used to relay an upstream response to the caller."""

from collections.abc import AsyncIterable, Iterable

import anyio
from starlette.datastructures import MutableHeaders
from starlette.requests import ClientDisconnect
from starlette.types import Receive, Send

from jsonproxy.utils.headers import filter_response_headers, merge_raw_headers


class ProxyResponse:
    """Response-side handle for one inbound request.

    Headers may be set freely until the response starts. ``relay`` streams an
    upstream response through while watching for the caller disconnecting.
    """

    def __init__(self, receive: Receive, send: Send) -> None:
        self._receive = receive
        self._send = send
        self.headers = MutableHeaders()
        self.started = False
        self.finished = False
        self.disconnected = False

    def set_header(self, name: str, value: str) -> None:
        if self.started:
            raise RuntimeError("Cannot set headers after the response has started")
        self.headers[name] = value

    async def relay(
        self,
        status_code: int,
        raw_headers: Iterable[tuple[bytes, bytes]],
        chunks: AsyncIterable[bytes],
    ) -> None:
        """Send status, headers and every body chunk to the caller.

        Raises:
            ClientDisconnect: If the caller went away before the last chunk
        """
        error: Exception | None = None

        async with anyio.create_task_group() as task_group:
            task_group.start_soon(self._listen_for_disconnect, task_group.cancel_scope)
            try:
                await self._start(status_code, raw_headers)
                async for chunk in chunks:
                    if chunk:
                        await self._send(
                            {"type": "http.response.body", "body": chunk, "more_body": True}
                        )
                await self._send(
                    {"type": "http.response.body", "body": b"", "more_body": False}
                )
                self.finished = True
            except Exception as exc:
                # Re-raised below, outside the task group
                error = exc
            task_group.cancel_scope.cancel()

        if error is not None:
            raise error
        if not self.finished:
            raise ClientDisconnect()

    async def _start(
        self, status_code: int, raw_headers: Iterable[tuple[bytes, bytes]]
    ) -> None:
        headers = merge_raw_headers(
            self.headers.raw, filter_response_headers(raw_headers)
        )
        await self._send(
            {"type": "http.response.start", "status": status_code, "headers": headers}
        )
        self.started = True

    async def _listen_for_disconnect(self, cancel_scope: anyio.CancelScope) -> None:
        while True:
            message = await self._receive()
            if message["type"] == "http.disconnect":
                break
        if not self.finished:
            self.disconnected = True
            cancel_scope.cancel()
