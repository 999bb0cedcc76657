"""Error kinds surfaced by the JSON forwarding proxy."""

from typing import Any


class ProxyError(Exception):
    """Base exception for proxy failures.

    Carries a short ``message``, an ``info`` payload with a human-readable
    ``detail`` sentence and a ``meta`` bag for postmortem debugging, and an
    optional underlying ``cause``.
    """

    name = "PROXY_ERROR"
    status_code = 500

    def __init__(
        self,
        message: str,
        detail: str = "",
        meta: dict[str, Any] | None = None,
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.info: dict[str, Any] = {"detail": detail, "meta": meta or {}}
        self.cause = cause
        self.__cause__ = cause

    @property
    def detail(self) -> str:
        return str(self.info["detail"])

    @property
    def meta(self) -> dict[str, Any]:
        return dict(self.info["meta"])

    def __str__(self) -> str:
        if self.cause is None:
            return self.message
        return f"{self.message}: {self.cause}"

    def to_dict(self) -> dict[str, Any]:
        """Render the error as a JSON-serializable response body."""
        return {
            "error": {
                "type": self.name,
                "message": str(self),
                "detail": self.detail,
            }
        }


class ProxyHostError(ProxyError):
    """The configured host did not resolve to a string (500)."""

    name = "PROXY_HOST_ERROR"
    status_code = 500

    def __init__(
        self,
        host: Any,
        url_path: str,
        body: Any = None,
        additional_log_message: str = "",
    ) -> None:
        super().__init__(
            message="`urlHost` could not be resolved to a valid string.",
            detail=(
                "The options.urlHost provided either was not a string, or the value "
                "returned from invoking urlHost() was not a string."
            ),
            meta={
                "additional_log_message": additional_log_message,
                "host": host,
                "url": f"{host}{url_path}",
                "url_path": url_path,
                "body": body,
            },
        )
        self.host = host
        self.url_path = url_path


class _ForwardError(ProxyError):
    """Shared shape of failures that happen once a host is known."""

    status_code = 502
    default_message = ""

    def __init__(
        self,
        host: str,
        url_path: str,
        cause: BaseException,
        body: Any = None,
        additional_log_message: str = "",
    ) -> None:
        super().__init__(
            message=self.default_message,
            detail=f"The proxied path is {url_path}. The host is {host}.",
            meta={
                "additional_log_message": additional_log_message,
                "url": f"{host}{url_path}",
                "body": body,
            },
            cause=cause,
        )
        self.host = host
        self.url_path = url_path


class ProxyRequestError(_ForwardError):
    """The outbound request could not be made (502)."""

    name = "PROXY_REQUEST_ERROR"
    default_message = "There was an error while making the proxied request."


class ProxyResponseError(_ForwardError):
    """Relaying the upstream response back to the caller failed (502)."""

    name = "PROXY_RESPONSE_ERROR"
    default_message = "There was an error while streaming the response."
