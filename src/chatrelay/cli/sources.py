"""chatrelay sources CLI commands.

Commands:
  chatrelay sources list          — show stored sources
  chatrelay sources remove <id>   — delete a source
"""

from __future__ import annotations

from typing import Annotated

import typer
from rich.console import Console
from rich.table import Table

from chatrelay.cli.errors import err_config, err_source_not_found
from chatrelay.config import ConfigError, RelayConfig, load_config
from chatrelay.session import ChatSession

console = Console()

sources_app = typer.Typer(
    name="sources",
    help="Manage stored sources (list, remove).",
    add_completion=False,
)

_PREVIEW_CHARS = 60


def _open_session(storage: str | None) -> ChatSession:
    try:
        config: RelayConfig = load_config()
    except ConfigError as exc:
        console.print(err_config(str(exc)))
        raise typer.Exit(1)
    if storage:
        config.storage.path = storage
    return ChatSession.from_config(config)


@sources_app.command("list")
def sources_list_cmd(
    storage: Annotated[
        str | None,
        typer.Option("--storage", help="Session state file (overrides config)."),
    ] = None,
) -> None:
    """List stored sources in insertion order."""
    session = _open_session(storage)
    try:
        sources = session.sources.list()
    finally:
        session.close()

    if not sources:
        console.print("[yellow]No sources stored.[/]\n  Run:  chatrelay ingest <file>")
        raise typer.Exit(0)

    table = Table(title="Sources", show_header=True, header_style="bold")
    table.add_column("ID", style="dim")
    table.add_column("Name", style="bold")
    table.add_column("Chars", justify="right")
    table.add_column("Embedding")
    table.add_column("Preview")

    for source in sources:
        preview = " ".join(source.text.split())[:_PREVIEW_CHARS]
        table.add_row(
            source.id,
            source.name,
            str(len(source.text)),
            "[green]yes[/]" if source.embedding is not None else "[dim]no[/]",
            preview,
        )

    console.print(table)
    console.print(f"\n  {len(sources)} source(s)")


@sources_app.command("remove")
def sources_remove_cmd(
    source_id: Annotated[str, typer.Argument(help="Id of the source to remove.")],
    storage: Annotated[
        str | None,
        typer.Option("--storage", help="Session state file (overrides config)."),
    ] = None,
    yes: Annotated[
        bool,
        typer.Option("--yes", "-y", help="Skip confirmation prompt."),
    ] = False,
) -> None:
    """Remove a source from the source list."""
    session = _open_session(storage)
    try:
        source = session.sources.get(source_id)
        if source is None:
            console.print(err_source_not_found(source_id))
            raise typer.Exit(0)

        console.print(f"\nRemove source: [bold]{source.name}[/]  ({len(source.text)} chars)")
        if not yes:
            if not typer.confirm("Confirm removal?", default=False):
                console.print("[dim]Cancelled.[/]")
                raise typer.Exit(0)

        session.sources.remove(source_id)
        console.print(f"\n[green]✓[/] Removed: {source.name}")
    finally:
        session.close()
