"""Tests for the chatrelay CLI entry point."""

from __future__ import annotations

from unittest.mock import patch

from typer.testing import CliRunner

from chatrelay import __version__
from chatrelay.cli.main import app

runner = CliRunner()


def test_version_command() -> None:
    result = runner.invoke(app, ["version"])
    assert result.exit_code == 0
    assert result.output.strip() == f"chatrelay {__version__}"


def test_version_flag() -> None:
    result = runner.invoke(app, ["--version"])
    assert result.exit_code == 0
    assert f"chatrelay {__version__}" in result.output


def test_help_lists_commands() -> None:
    result = runner.invoke(app, ["--help"])
    assert result.exit_code == 0
    for command in ("serve", "ingest", "sources"):
        assert command in result.output


def test_serve_runs_uvicorn_with_overrides(tmp_path, monkeypatch) -> None:
    monkeypatch.chdir(tmp_path)
    with patch("chatrelay.cli.serve.uvicorn.run") as mock_run, patch(
        "chatrelay.cli.serve.setup_logging"
    ):
        result = runner.invoke(app, ["serve", "--port", "8123", "--memory"])

    assert result.exit_code == 0, result.output
    assert "OPENAI_API_KEY not set" in result.output
    kwargs = mock_run.call_args.kwargs
    assert kwargs["port"] == 8123
    assert kwargs["host"] == "127.0.0.1"
    assert kwargs["log_level"] == "info"
