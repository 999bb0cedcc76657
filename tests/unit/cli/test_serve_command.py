"""Tests for the jsonproxy command line interface."""

import json
import os
from pathlib import Path
from unittest.mock import patch

import pytest
from fastapi import FastAPI
from typer.testing import CliRunner

from jsonproxy._version import __version__
from jsonproxy.cli.main import app


@pytest.fixture
def cli_runner() -> CliRunner:
    return CliRunner()


@pytest.fixture(autouse=True)
def clean_environment(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(tmp_path)
    for key in list(os.environ):
        if key.upper().startswith("JSONPROXY_"):
            monkeypatch.delenv(key)


@pytest.mark.unit
def test_version(cli_runner: CliRunner) -> None:
    result = cli_runner.invoke(app, ["--version"])

    assert result.exit_code == 0
    assert __version__ in result.stdout


@pytest.mark.unit
class TestServeCommand:
    def test_serve_runs_uvicorn(self, cli_runner: CliRunner) -> None:
        with (
            patch("jsonproxy.cli.main.uvicorn.run") as mock_run,
            patch("jsonproxy.cli.main.setup_logging") as mock_setup_logging,
        ):
            result = cli_runner.invoke(
                app,
                [
                    "serve",
                    "--url-host",
                    "http://svc.internal",
                    "--port",
                    "9100",
                    "--log-level",
                    "debug",
                ],
            )

        assert result.exit_code == 0, result.output
        mock_run.assert_called_once()
        (served_app,), kwargs = mock_run.call_args
        assert isinstance(served_app, FastAPI)
        assert kwargs["host"] == "127.0.0.1"
        assert kwargs["port"] == 9100
        assert kwargs["log_config"] is None
        assert mock_setup_logging.call_args.kwargs["log_level_name"] == "DEBUG"

    def test_serve_without_url_host_fails(self, cli_runner: CliRunner) -> None:
        with (
            patch("jsonproxy.cli.main.uvicorn.run") as mock_run,
            patch("jsonproxy.cli.main.setup_logging"),
        ):
            result = cli_runner.invoke(app, ["serve"])

        assert result.exit_code == 1
        mock_run.assert_not_called()

    def test_serve_rejects_invalid_log_level(self, cli_runner: CliRunner) -> None:
        with (
            patch("jsonproxy.cli.main.uvicorn.run") as mock_run,
            patch("jsonproxy.cli.main.setup_logging") as mock_setup_logging,
        ):
            result = cli_runner.invoke(
                app,
                ["serve", "--url-host", "http://svc.internal", "--log-level", "bogus"],
            )

        assert result.exit_code == 1
        mock_setup_logging.assert_not_called()
        mock_run.assert_not_called()

    def test_serve_with_invalid_config_file(
        self, cli_runner: CliRunner, tmp_path: Path
    ) -> None:
        config_file = tmp_path / "broken.toml"
        config_file.write_text("[proxy\n")

        with patch("jsonproxy.cli.main.uvicorn.run") as mock_run:
            result = cli_runner.invoke(app, ["serve", "--config", str(config_file)])

        assert result.exit_code == 1
        mock_run.assert_not_called()


@pytest.mark.unit
def test_config_command_prints_settings(
    cli_runner: CliRunner, tmp_path: Path
) -> None:
    config_file = tmp_path / "jsonproxy.toml"
    config_file.write_text('[proxy]\nurl_host = "http://svc.internal"\n')

    result = cli_runner.invoke(app, ["config", "--config", str(config_file)])

    assert result.exit_code == 0
    # Log lines may share the captured output
    data = json.loads(result.stdout[result.stdout.index("{\n") :])
    assert data["proxy"]["url_host"] == "http://svc.internal"
    assert data["server"]["port"] == 8000
