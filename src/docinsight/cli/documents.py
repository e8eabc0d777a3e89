"""docinsight documents — list a user's documents and totals."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer
from rich.table import Table

from docinsight.cli.context import console, open_services


def documents_cmd(
    owner: Annotated[
        int,
        typer.Option("--owner", "-o", help="Owning user id."),
    ],
    db: Annotated[
        Path | None,
        typer.Option("--db", help="Path to the database (default: from config)."),
    ] = None,
) -> None:
    """List a user's documents with chunk counts."""
    with open_services(db) as services:
        summaries = services.ingestor.list_documents(owner)
        stats = services.ingestor.stats(owner)

    if not summaries:
        console.print(f"[dim]No documents for owner {owner}.[/]")
        console.print("  Run:  docinsight ingest --file <path> --owner <id>")
        return

    table = Table(title=f"Documents — owner {owner}")
    table.add_column("ID", justify="right")
    table.add_column("Filename")
    table.add_column("Type")
    table.add_column("Size", justify="right")
    table.add_column("Chunks", justify="right")
    table.add_column("Uploaded")

    for summary in summaries:
        doc = summary.document
        chunks = str(summary.chunk_count) if summary.chunk_count else "[yellow]0[/]"
        table.add_row(
            str(doc.id),
            doc.filename,
            doc.content_type.rsplit("/", 1)[-1],
            f"{doc.size_bytes:,}",
            chunks,
            (doc.created_at or "")[:19].replace("T", " "),
        )

    console.print(table)
    console.print(f"  {stats.documents} documents, {stats.chunks} chunks")
