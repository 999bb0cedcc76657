"""Error handlers for the jsonproxy API server."""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from jsonproxy.core.errors import ProxyError
from jsonproxy.core.logging import get_logger


logger = get_logger(__name__)


def setup_error_handlers(app: FastAPI) -> None:
    """Setup error handlers for the FastAPI application.

    Args:
        app: FastAPI application instance
    """
    logger.debug("error_handlers_setup_start")

    @app.exception_handler(ProxyError)
    async def proxy_error_handler(request: Request, exc: ProxyError) -> JSONResponse:
        """Render proxy failures as JSON with the error's status code."""
        logger.error(
            "proxy_error",
            error_type=exc.name,
            error_message=str(exc),
            detail=exc.detail,
            status_code=exc.status_code,
            request_method=request.method,
            request_url=str(request.url.path),
            url=exc.meta.get("url"),
        )

        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    logger.debug("error_handlers_setup_complete")
