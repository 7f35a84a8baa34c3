"""chatrelay ingest — add local files to the session's source list.

Each file goes through the same pipeline as an HTTP upload: extraction by
type (PDF, image, text, JSON), then an optional embedding when the vendor
key is set. The result is stored as a source; ``--select`` also marks it
for inclusion in the next prompt.

Usage:
  chatrelay ingest notes.txt
  chatrelay ingest report.pdf data.json --select
"""

from __future__ import annotations

import mimetypes
import os
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console

from chatrelay.cli.errors import err_config, err_extraction, err_file_not_found, warn_no_embedding
from chatrelay.config import ConfigError, load_config
from chatrelay.errors import ExtractionError
from chatrelay.ingest.embedding import EmbeddingRequestor
from chatrelay.ingest.upload import process_upload
from chatrelay.session import ChatSession
from chatrelay.store.models import Source

console = Console()


def ingest_cmd(
    files: Annotated[
        list[Path],
        typer.Argument(help="Files to add as sources."),
    ],
    select: Annotated[
        bool,
        typer.Option("--select", help="Select the new sources for the next prompt."),
    ] = False,
    storage: Annotated[
        str | None,
        typer.Option("--storage", help="Session state file (overrides config)."),
    ] = None,
) -> None:
    """Extract files and store them as sources."""
    try:
        config = load_config()
    except ConfigError as exc:
        console.print(err_config(str(exc)))
        raise typer.Exit(1)
    if storage:
        config.storage.path = storage

    session = ChatSession.from_config(config)
    requestor = EmbeddingRequestor(config.embedding, api_key_env=config.vendor.api_key_env)
    if not os.environ.get(config.vendor.api_key_env):
        console.print(warn_no_embedding(config.vendor.api_key_env))

    failed = 0
    try:
        for path in files:
            if not path.is_file():
                console.print(err_file_not_found(str(path)))
                failed += 1
                continue
            mime_type = mimetypes.guess_type(path.name)[0] or ""
            try:
                result = process_upload(path.read_bytes(), path.name, mime_type, requestor)
            except ExtractionError as exc:
                console.print(err_extraction(path.name, exc.message))
                failed += 1
                continue

            source = session.sources.add(
                Source(name=result.file_name, text=result.text, embedding=result.embedding)
            )
            if select:
                session.sources.select(source.id)
            embedded = "embedded" if result.embedding is not None else "no embedding"
            console.print(
                f"[green]✓[/] {path.name}  [dim]{result.file_category}, "
                f"{len(result.text)} chars, {embedded}[/]  id={source.id}"
            )
    finally:
        session.close()

    if failed:
        raise typer.Exit(1)
