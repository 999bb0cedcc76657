"""HTTP API for the jsonproxy server."""

from .app import create_app, create_proxy_config


__all__ = ["create_app", "create_proxy_config"]
