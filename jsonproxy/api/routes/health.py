"""Health check endpoint for the jsonproxy server."""

from typing import Any

from fastapi import APIRouter, Response

from jsonproxy._version import __version__
from jsonproxy.core.logging import get_logger


router = APIRouter()
logger = get_logger(__name__)


@router.get("/health")
async def health(response: Response) -> dict[str, Any]:
    """Liveness check that only verifies the process is serving requests."""
    response.headers["Cache-Control"] = "no-cache, no-store, must-revalidate"

    logger.debug("health_check_request")

    return {
        "status": "pass",
        "version": __version__,
        "output": "Application process is running",
    }
