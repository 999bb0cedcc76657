import os
import tomllib
from functools import lru_cache
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, ValidationError
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from jsonproxy.core.logging import get_logger

from .logging import LoggingSettings
from .proxy import ProxySettings
from .server import ServerSettings


__all__ = ["Settings", "ConfigurationError", "get_settings"]


class ConfigurationError(Exception):
    """Raised when configuration loading or validation fails."""

    pass


class Settings(BaseSettings):
    """
    Configuration settings for the jsonproxy server.

    Settings are loaded from environment variables, .env files, and an optional
    TOML configuration file. Environment variables take precedence over the
    TOML file, which takes precedence over defaults.
    """

    model_config = SettingsConfigDict(
        env_prefix="JSONPROXY_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        env_nested_delimiter="__",
    )

    server: ServerSettings = Field(
        default_factory=ServerSettings,
        description="Server configuration settings",
    )

    logging: LoggingSettings = Field(
        default_factory=LoggingSettings,
        description="Logging configuration",
    )

    proxy: ProxySettings = Field(
        default_factory=ProxySettings,
        description="Proxy forwarding configuration",
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        # TOML values arrive as init kwargs; the environment must win over them
        return env_settings, dotenv_settings, init_settings, file_secret_settings

    @property
    def server_url(self) -> str:
        """Get the complete server URL."""
        return f"http://{self.server.host}:{self.server.port}"

    @classmethod
    def load_toml_config(cls, toml_path: Path) -> dict[str, Any]:
        """Load configuration from a TOML file."""
        try:
            with toml_path.open("rb") as f:
                return tomllib.load(f)
        except OSError as e:
            raise ConfigurationError(
                f"Cannot read TOML config file {toml_path}: {e}"
            ) from e
        except tomllib.TOMLDecodeError as e:
            raise ConfigurationError(f"Invalid TOML syntax in {toml_path}: {e}") from e

    @classmethod
    def from_config(
        cls,
        config_path: Path | str | None = None,
        **overrides: Any,
    ) -> "Settings":
        """Create Settings from an optional TOML file plus explicit overrides.

        Args:
            config_path: TOML file; defaults to $JSONPROXY_CONFIG_FILE when set
            **overrides: Nested values applied last, e.g. ``proxy={"url_host": ...}``

        Raises:
            ConfigurationError: If the file is missing, unreadable or invalid
        """
        if config_path is None:
            config_path_env = os.environ.get("JSONPROXY_CONFIG_FILE")
            if config_path_env:
                config_path = Path(config_path_env)

        if isinstance(config_path, str):
            config_path = Path(config_path)

        config_data: dict[str, Any] = {}
        if config_path is not None:
            if config_path.suffix.lower() != ".toml":
                raise ConfigurationError(
                    f"Unsupported config file format: {config_path.suffix}. "
                    "Only TOML (.toml) files are supported."
                )
            config_data = cls.load_toml_config(config_path)
            logger = get_logger(__name__)
            logger.info("config_file_loaded", path=str(config_path))

        try:
            settings = cls(**config_data)
        except ValueError as e:
            raise ConfigurationError(f"Invalid configuration: {e}") from e

        def _apply_overrides(target: BaseModel, values: dict[str, Any]) -> BaseModel:
            # Rebuild each model so its validators run on the overridden values
            updates: dict[str, Any] = {}
            for k, v in values.items():
                if v is None:
                    continue
                current = getattr(target, k, None)
                if isinstance(v, dict) and isinstance(current, BaseModel):
                    updates[k] = _apply_overrides(current, v)
                else:
                    updates[k] = v
            if not updates:
                return target
            data = {name: getattr(target, name) for name in type(target).model_fields}
            return type(target).model_validate({**data, **updates})

        for section, values in overrides.items():
            current = getattr(settings, section, None)
            if not isinstance(values, dict) or not isinstance(current, BaseModel):
                raise ConfigurationError(f"Unknown settings section: {section}")
            try:
                setattr(settings, section, _apply_overrides(current, values))
            except ValidationError as e:
                raise ConfigurationError(f"Invalid {section} override: {e}") from e

        return settings


@lru_cache
def get_settings() -> Settings:
    """Get the process-wide settings instance."""
    return Settings.from_config()
