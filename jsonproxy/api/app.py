"""FastAPI application factory for the standalone proxy server."""

from fastapi import FastAPI

from jsonproxy._version import __version__
from jsonproxy.api.middleware.errors import setup_error_handlers
from jsonproxy.api.routes.health import router as health_router
from jsonproxy.config.settings import ConfigurationError, Settings, get_settings
from jsonproxy.core.logging import get_logger
from jsonproxy.proxy.app import JSONProxy
from jsonproxy.proxy.config import ProxyConfig


logger = get_logger(__name__)

EVENT_LOGGER_NAME = "jsonproxy.events"


def create_proxy_config(settings: Settings) -> ProxyConfig:
    """Build the proxy configuration from static settings.

    Raises:
        ConfigurationError: If no destination host is configured
    """
    proxy_settings = settings.proxy
    if not proxy_settings.url_host:
        raise ConfigurationError(
            "proxy.url_host must be set (e.g. JSONPROXY_PROXY__URL_HOST=http://svc.internal)"
        )

    return ProxyConfig(
        url_host=proxy_settings.url_host.rstrip("/"),
        headers=proxy_settings.headers,
        add_curl_header=proxy_settings.add_curl_header,
        additional_log_message=proxy_settings.additional_log_message,
        logger=get_logger(EVENT_LOGGER_NAME),
        client_options={
            "timeout": proxy_settings.timeout,
            "verify": proxy_settings.verify,
        },
    )


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create the FastAPI application with the proxy mounted.

    Args:
        settings: Optional settings; loaded from the environment when omitted

    Returns:
        Configured FastAPI application
    """
    if settings is None:
        settings = get_settings()

    app = FastAPI(
        title="jsonproxy",
        description="Forwards JSON requests to a backend service",
        version=__version__,
    )

    setup_error_handlers(app)
    app.include_router(health_router, tags=["health"])

    mount_path = settings.proxy.mount_path
    app.mount(mount_path, JSONProxy(create_proxy_config(settings)), name="proxy")

    logger.info(
        "proxy_mounted",
        mount_path=mount_path,
        url_host=settings.proxy.url_host,
        add_curl_header=settings.proxy.add_curl_header,
    )
    return app
