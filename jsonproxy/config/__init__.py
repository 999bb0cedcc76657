"""Configuration module for jsonproxy."""

from .logging import LoggingSettings
from .proxy import ProxySettings
from .server import ServerSettings
from .settings import ConfigurationError, Settings, get_settings


__all__ = [
    "ConfigurationError",
    "LoggingSettings",
    "ProxySettings",
    "ServerSettings",
    "Settings",
    "get_settings",
]
