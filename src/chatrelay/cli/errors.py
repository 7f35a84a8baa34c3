"""chatrelay rich error messages — actionable feedback.

Every error shown to the user must contain:
  1. What went wrong (clear cause)
  2. The exact action the user should take to fix it

Usage:
    from chatrelay.cli.errors import err_file_not_found
    console.print(err_file_not_found("notes.txt"))
    raise typer.Exit(1)
"""

from __future__ import annotations


def err_config(message: str) -> str:
    """Config file rejected by the loader (forbidden key, bad value)."""
    return f"[red]Error:[/] Invalid configuration.\n  {message}"


def err_file_not_found(path: str) -> str:
    return (
        f"[red]Error:[/] File not found: '{path}'\n"
        "  Check the path and try again."
    )


def err_extraction(file_name: str, message: str) -> str:
    """Uploaded file could not be read."""
    return (
        f"[red]Error:[/] Could not extract '{file_name}': {message}\n"
        "  Supported types: PDF, images, text files (.txt, .md), JSON."
    )


def err_source_not_found(source_id: str) -> str:
    """Source id not present in the session store."""
    return (
        f"[yellow]Source not found:[/] '{source_id}' is not in the source list.\n"
        "  Run:  chatrelay sources list  to see all sources."
    )


def warn_no_embedding(env_var: str = "OPENAI_API_KEY") -> str:
    """Source stored without an embedding."""
    return (
        "[yellow]⚠[/] Stored without an embedding.\n"
        f"  Set {env_var} to compute embeddings on ingest."
    )


def warn_no_api_key(env_var: str = "OPENAI_API_KEY") -> str:
    """Server starting without a vendor key; only local features will work."""
    return (
        f"[yellow]Warning:[/] {env_var} not set.\n"
        "  Chat, image, voice and browse requests will fail until it is set.\n"
        f"  Set:  export {env_var}=sk-..."
    )
