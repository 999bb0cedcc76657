"""Command line interface for the jsonproxy server."""

import json
import sys
from pathlib import Path
from typing import Any

import typer
import uvicorn
from rich.console import Console

from jsonproxy._version import __version__
from jsonproxy.api.app import create_app
from jsonproxy.config.settings import ConfigurationError, Settings
from jsonproxy.core.logging import get_logger, setup_logging


app = typer.Typer(help="Forward JSON requests to a backend service")
console = Console(stderr=True)
logger = get_logger(__name__)


def _load_settings(config: Path | None, **overrides: Any) -> Settings:
    try:
        return Settings.from_config(config_path=config, **overrides)
    except ConfigurationError as e:
        console.print(f"[bold red]Configuration error:[/bold red] {e}")
        raise typer.Exit(1) from e


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(__version__)
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
) -> None:
    """jsonproxy command line interface."""


@app.command()
def serve(
    host: str | None = typer.Option(None, "--host", "-h", help="Host to bind to"),
    port: int | None = typer.Option(None, "--port", "-p", help="Port to bind to"),
    config: Path | None = typer.Option(
        None, "--config", "-c", help="Path to a TOML configuration file"
    ),
    url_host: str | None = typer.Option(
        None, "--url-host", "-u", help="Destination host to forward requests to"
    ),
    log_level: str | None = typer.Option(
        None, "--log-level", help="Logging level (DEBUG, INFO, WARNING, ERROR)"
    ),
) -> None:
    """Run the proxy server."""
    settings = _load_settings(
        config,
        server={"host": host, "port": port},
        proxy={"url_host": url_host},
        logging={"level": log_level.upper() if log_level else None},
    )

    setup_logging(
        json_logs=settings.logging.use_json(sys.stderr.isatty()),
        log_level_name=settings.logging.level,
        show_path=settings.logging.show_path,
        console_width=settings.logging.console_width,
    )

    try:
        fastapi_app = create_app(settings)
    except ConfigurationError as e:
        console.print(f"[bold red]Configuration error:[/bold red] {e}")
        raise typer.Exit(1) from e

    logger.info(
        "server_starting",
        url=settings.server_url,
        url_host=settings.proxy.url_host,
    )

    # Logging is already configured; keep uvicorn from installing its own
    uvicorn.run(
        fastapi_app,
        host=settings.server.host,
        port=settings.server.port,
        log_config=None,
    )


@app.command("config")
def show_config(
    config: Path | None = typer.Option(
        None, "--config", "-c", help="Path to a TOML configuration file"
    ),
) -> None:
    """Print the effective configuration as JSON."""
    settings = _load_settings(config)
    typer.echo(json.dumps(settings.model_dump(mode="json"), indent=2))


if __name__ == "__main__":
    app()
