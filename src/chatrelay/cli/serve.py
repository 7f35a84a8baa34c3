"""chatrelay serve — run the HTTP API with uvicorn."""

from __future__ import annotations

import os
from typing import Annotated

import typer
import uvicorn
from rich.console import Console

from chatrelay.api.app import create_app
from chatrelay.cli.errors import err_config, warn_no_api_key
from chatrelay.config import ConfigError, load_config
from chatrelay.logging_config import setup_logging

console = Console()


def serve_cmd(
    host: Annotated[
        str | None,
        typer.Option("--host", help="Bind address (overrides config)."),
    ] = None,
    port: Annotated[
        int | None,
        typer.Option("--port", "-p", help="Bind port (overrides config)."),
    ] = None,
    storage: Annotated[
        str | None,
        typer.Option("--storage", help="Session state file (overrides config)."),
    ] = None,
    memory: Annotated[
        bool,
        typer.Option("--memory", help="Keep session state in memory only."),
    ] = False,
) -> None:
    """Start the chatrelay API server."""
    try:
        config = load_config()
    except ConfigError as exc:
        console.print(err_config(str(exc)))
        raise typer.Exit(1)

    if storage:
        config.storage.path = storage
    if memory:
        config.storage.path = None
    setup_logging(config.logging.level, config.logging.file)

    if not os.environ.get(config.vendor.api_key_env):
        console.print(warn_no_api_key(config.vendor.api_key_env))

    uvicorn.run(
        create_app(config),
        host=host or config.server.host,
        port=port or config.server.port,
        log_level=config.logging.level.lower(),
    )
