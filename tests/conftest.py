"""Shared test fixtures and helpers for jsonproxy tests.

Outbound calls are faked with ``httpx.MockTransport`` handed to the proxy
through ``client_options``; inbound calls go through ``httpx.ASGITransport``
or, where the absence of a response must be asserted, a raw ASGI recorder.
"""

import asyncio
from collections.abc import Callable
from typing import Any

import httpx
import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from jsonproxy.api.middleware.errors import setup_error_handlers
from jsonproxy.core.errors import ProxyError
from jsonproxy.core.logging import setup_logging
from jsonproxy.proxy.app import JSONProxy
from jsonproxy.proxy.config import ProxyConfig
from jsonproxy.proxy.response import ProxyResponse


def pytest_configure(config: pytest.Config) -> None:
    """Configure pytest with custom settings."""
    setup_logging(json_logs=False, log_level_name="DEBUG")


class RecordingLogger:
    """Logger capturing proxy events as (level, message, fields)."""

    def __init__(self) -> None:
        self.records: list[tuple[str, str, dict[str, Any]]] = []

    def info(self, event: str, **fields: Any) -> None:
        self.records.append(("info", event, fields))

    def error(self, event: str, **fields: Any) -> None:
        self.records.append(("error", event, fields))

    def messages(self, level: str | None = None) -> list[str]:
        return [
            message
            for record_level, message, _ in self.records
            if level is None or record_level == level
        ]


class UpstreamStub:
    """Fake destination service recording every outbound request."""

    def __init__(
        self,
        status_code: int = 200,
        json: Any = None,
        headers: dict[str, str] | None = None,
        raises: Exception | None = None,
        stream: httpx.AsyncByteStream | None = None,
    ) -> None:
        self.status_code = status_code
        self.json = {"ok": True} if json is None else json
        self.headers = headers or {}
        self.raises = raises
        self.stream = stream
        self.requests: list[httpx.Request] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.raises is not None:
            raise self.raises
        if self.stream is not None:
            return httpx.Response(
                self.status_code, headers=self.headers, stream=self.stream
            )
        return httpx.Response(self.status_code, json=self.json, headers=self.headers)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


class ErrorRecorder:
    """Error channel collecting delivered errors without responding."""

    def __init__(self) -> None:
        self.errors: list[ProxyError] = []

    async def __call__(self, error: ProxyError, response: ProxyResponse) -> None:
        self.errors.append(error)


class ASGIRecorder:
    """Drive an ASGI app directly and record everything it sends."""

    def __init__(self, disconnect_after_body: bool = False) -> None:
        self.sent: list[dict[str, Any]] = []
        self.disconnect_after_body = disconnect_after_body

    @property
    def started(self) -> dict[str, Any] | None:
        for message in self.sent:
            if message["type"] == "http.response.start":
                return message
        return None

    @property
    def body(self) -> bytes:
        return b"".join(
            message.get("body", b"")
            for message in self.sent
            if message["type"] == "http.response.body"
        )

    async def call(
        self,
        app: Callable[..., Any],
        method: str = "POST",
        path: str = "/widgets/7",
        body: bytes = b"",
        root_path: str = "",
        state: dict[str, Any] | None = None,
    ) -> None:
        scope = {
            "type": "http",
            "asgi": {"version": "3.0"},
            "http_version": "1.1",
            "method": method,
            "scheme": "http",
            "path": path,
            "raw_path": path.encode(),
            "root_path": root_path,
            "query_string": b"",
            "headers": [(b"content-type", b"application/json")],
            "client": ("127.0.0.1", 50000),
            "server": ("testserver", 80),
            "state": state or {},
        }
        pending = [{"type": "http.request", "body": body, "more_body": False}]
        response_complete = asyncio.Event()

        async def receive() -> dict[str, Any]:
            if pending:
                return pending.pop(0)
            if not self.disconnect_after_body:
                await response_complete.wait()
            return {"type": "http.disconnect"}

        async def send(message: dict[str, Any]) -> None:
            self.sent.append(message)
            if message["type"] == "http.response.body" and not message.get(
                "more_body", False
            ):
                response_complete.set()

        await app(scope, receive, send)


def create_test_app(proxy: JSONProxy, mount_path: str = "/api") -> FastAPI:
    """FastAPI app with error handlers and ``proxy`` mounted."""
    app = FastAPI()
    setup_error_handlers(app)
    app.mount(mount_path, proxy)
    return app


@pytest.fixture
def event_logger() -> RecordingLogger:
    return RecordingLogger()


@pytest.fixture
def upstream() -> UpstreamStub:
    return UpstreamStub()


@pytest.fixture
def error_recorder() -> ErrorRecorder:
    return ErrorRecorder()


@pytest.fixture
def make_config(
    event_logger: RecordingLogger, upstream: UpstreamStub
) -> Callable[..., ProxyConfig]:
    """Build a ProxyConfig wired to the recording logger and upstream stub."""

    def factory(**overrides: Any) -> ProxyConfig:
        options: dict[str, Any] = {
            "url_host": "http://svc.internal",
            "logger": event_logger,
            "client_options": {"transport": upstream.transport},
        }
        options.update(overrides)
        return ProxyConfig(**options)

    return factory


@pytest.fixture
def client_for() -> Callable[[FastAPI], AsyncClient]:
    def factory(app: FastAPI) -> AsyncClient:
        return AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver")

    return factory
