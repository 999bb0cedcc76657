"""Proxy lifecycle events sent to the configured logger."""

import sys
import time
from typing import Any

from rich.pretty import pretty_repr

from jsonproxy.core.logging import get_logger


logger = get_logger(__name__)

NS_PER_MS = 1e6

# Containers in the start event body (arrays and objects alike) are cut to
# this many elements, keeping one log line bounded for any body shape
BODY_MAX_LENGTH = 20

# Wide enough that a body always renders on a single line
BODY_MAX_WIDTH = sys.maxsize


class Stopwatch:
    """Monotonic high-resolution timer."""

    def __init__(self) -> None:
        self._start_ns = time.perf_counter_ns()

    def elapsed_ms(self) -> float:
        return (time.perf_counter_ns() - self._start_ns) / NS_PER_MS


def render_body(body: Any) -> str:
    """Size-capped textual rendering of an inbound body."""
    return pretty_repr(body, max_width=BODY_MAX_WIDTH, max_length=BODY_MAX_LENGTH)


class ProxyEventEmitter:
    """Emit start, error and end events for one proxy mount.

    Every call is best-effort: a failing logger is reported on the package
    logger and never alters the request flow.
    """

    def __init__(self, event_logger: Any = None, additional_log_message: str = "") -> None:
        self.event_logger = event_logger
        self.additional_log_message = additional_log_message

    def _message(self, base: str) -> str:
        if self.additional_log_message:
            return f"{base} {self.additional_log_message}"
        return base

    def _emit(self, level: str, base: str, **fields: Any) -> None:
        if self.event_logger is None:
            return
        try:
            getattr(self.event_logger, level)(self._message(base), **fields)
        except Exception as e:
            logger.warning(
                "proxy_event_log_failed",
                event_message=base,
                error=str(e),
                exc_info=e,
            )

    def start(
        self,
        host: str,
        url_path: str,
        headers: dict[str, Any],
        url: str,
        body: Any,
    ) -> None:
        self._emit(
            "info",
            "Proxy start.",
            host=host,
            url_path=url_path,
            headers=headers,
            url=url,
            body=render_body(body),
        )

    def host_error(self, host: Any, url_path: str) -> None:
        self._error("PROXY_HOST_ERROR", host, url_path)

    def request_error(self, host: str, url_path: str) -> None:
        self._error("PROXY_REQUEST_ERROR", host, url_path)

    def response_error(self, host: str, url_path: str) -> None:
        self._error("PROXY_RESPONSE_ERROR", host, url_path)

    def _error(self, name: str, host: Any, url_path: str) -> None:
        self._emit(
            "error",
            f"Proxy Error: {name}",
            host=host,
            url_path=url_path,
            url=f"{host}{url_path}",
        )

    def end(self, host: str, url_path: str, duration_ms: float) -> None:
        self._emit(
            "info",
            "Proxy end.",
            host=host,
            url_path=url_path,
            duration_ms=duration_ms,
            duration=f"{duration_ms} ms",
        )
