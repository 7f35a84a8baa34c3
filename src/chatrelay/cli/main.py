"""chatrelay CLI entry point."""

from __future__ import annotations

from typing import Annotated

import typer

from chatrelay import __version__
from chatrelay.cli.ingest import ingest_cmd
from chatrelay.cli.serve import serve_cmd
from chatrelay.cli.sources import sources_app


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"chatrelay {__version__}")
        raise typer.Exit()


app = typer.Typer(
    name="chatrelay",
    help=(
        "chatrelay — chat proxy with source-based context.\n\n"
        "  chatrelay serve    Run the HTTP API for the chat front end.\n"
        "  chatrelay ingest   Add local files to the source list."
    ),
    add_completion=False,
)


@app.callback()
def main_callback(
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            callback=_version_callback,
            is_eager=True,
            help="Show version and exit.",
        ),
    ] = False,
) -> None:
    """chatrelay — chat proxy with source-based context."""


app.command("serve")(serve_cmd)
app.command("ingest")(ingest_cmd)
app.add_typer(sources_app, name="sources")


@app.command("version")
def version_cmd() -> None:
    """Show the installed chatrelay version."""
    typer.echo(f"chatrelay {__version__}")


if __name__ == "__main__":
    app()
