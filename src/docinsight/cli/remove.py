"""docinsight remove — document lifecycle management.

Removes a document and everything derived from it:
  - chunks (with their embeddings)
  - the stored upload (best effort; a failure is logged, not fatal)
  - the document record

Usage:
  docinsight remove --id 12
  docinsight remove --id 12 --yes
"""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer

from docinsight.cli.context import console, open_services
from docinsight.cli.errors import err_not_found
from docinsight.errors import NotFound


def remove_cmd(
    document_id: Annotated[
        int,
        typer.Option("--id", help="Document id to remove."),
    ],
    db: Annotated[
        Path | None,
        typer.Option("--db", help="Path to the database (default: from config)."),
    ] = None,
    yes: Annotated[
        bool,
        typer.Option("--yes", "-y", help="Skip confirmation prompt."),
    ] = False,
) -> None:
    """Remove a document and all its data from the knowledge base."""
    with open_services(db) as services:
        try:
            summary = services.ingestor.describe(services.ingestor.get_document(document_id))
        except NotFound as exc:
            console.print(err_not_found(exc.kind, exc.entity_id))
            raise typer.Exit(1)

        document = summary.document
        console.print(f"\nRemove document {document.id}: [bold]{document.filename}[/]")
        console.print(
            f"  Owner: {document.owner_id}  |  "
            f"Chunks: {summary.chunk_count}  |  "
            f"Size: {document.size_bytes} bytes"
        )

        if not yes:
            if not typer.confirm("Confirm removal?", default=False):
                console.print("[dim]Cancelled.[/]")
                raise typer.Exit(0)

        services.ingestor.remove(document_id)
        console.print(f"\n[green]✓[/] Removed: {document.filename}")
        console.print(f"  {summary.chunk_count} chunks deleted")
