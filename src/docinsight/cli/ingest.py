"""docinsight ingest / reprocess — add documents to the knowledge base.

Content type is taken from --content-type, or derived from the extension:
  .pdf               → application/pdf
  .docx              → application/vnd.openxmlformats-officedocument.wordprocessingml.document
  .txt .text .md .log → text/plain

Usage:
  docinsight ingest --file handbook.pdf --owner 1
  docinsight reprocess --id 12
"""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer
from rich.progress import Progress, SpinnerColumn, TextColumn

from docinsight.cli.context import console, open_services
from docinsight.cli.errors import (
    err_file_not_found,
    err_ingestion,
    err_no_api_key,
    err_not_found,
    err_storage,
    err_unsupported_format,
)
from docinsight.errors import IngestionFailure, NotFound, StorageFailure, UnsupportedFormat
from docinsight.ingest.base import ContentType
from docinsight.rag.llm_client import validate_api_key

_EXTENSION_TYPES: dict[str, ContentType] = {
    ".pdf": ContentType.PDF,
    ".docx": ContentType.DOCX,
    ".txt": ContentType.PLAIN_TEXT,
    ".text": ContentType.PLAIN_TEXT,
    ".md": ContentType.PLAIN_TEXT,
    ".log": ContentType.PLAIN_TEXT,
}


def ingest_cmd(
    file: Annotated[
        Path,
        typer.Option("--file", "-f", help="File to upload."),
    ],
    owner: Annotated[
        int,
        typer.Option("--owner", "-o", help="Owning user id."),
    ],
    content_type: Annotated[
        str | None,
        typer.Option("--content-type", help="Declared MIME type (default: from extension)."),
    ] = None,
    db: Annotated[
        Path | None,
        typer.Option("--db", help="Path to the database (default: from config)."),
    ] = None,
) -> None:
    """Upload a document, then chunk and embed it."""
    if not file.is_file():
        console.print(err_file_not_found(str(file)))
        raise typer.Exit(1)

    declared = content_type or guess_content_type(file)
    data = file.read_bytes()
    if not data:
        console.print(f"[red]Error:[/] '{file}' is empty — nothing to ingest.")
        raise typer.Exit(1)

    with open_services(db, must_exist=False) as services:
        _require_api_key(services.config.embedding.model)

        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            transient=True,
            console=console,
        ) as prog:
            prog.add_task(f"Ingesting {file.name}…", total=None)
            try:
                document = services.ingestor.ingest(data, file.name, declared, owner)
            except UnsupportedFormat as exc:
                console.print(err_unsupported_format(exc.content_type))
                raise typer.Exit(1)
            except StorageFailure as exc:
                console.print(err_storage(str(exc)))
                raise typer.Exit(1)
            except IngestionFailure as exc:
                console.print(err_ingestion(str(exc), exc.document_id))
                raise typer.Exit(1)

        chunks = services.repo.count_chunks_by_document(document.id)
        console.print(f"[green]✓[/] {file.name} → document {document.id} ({chunks} chunks)")


def reprocess_cmd(
    document_id: Annotated[
        int,
        typer.Option("--id", help="Document id to re-index."),
    ],
    db: Annotated[
        Path | None,
        typer.Option("--db", help="Path to the database (default: from config)."),
    ] = None,
) -> None:
    """Clear a document's chunks and index its stored file again."""
    with open_services(db) as services:
        _require_api_key(services.config.embedding.model)
        try:
            count = services.ingestor.reprocess(document_id)
        except NotFound as exc:
            console.print(err_not_found(exc.kind, exc.entity_id))
            raise typer.Exit(1)
        except IngestionFailure as exc:
            console.print(err_ingestion(str(exc), exc.document_id))
            raise typer.Exit(1)

        console.print(f"[green]✓[/] Document {document_id} re-indexed ({count} chunks)")


def guess_content_type(path: Path) -> str:
    """Map *path*'s extension to a supported MIME type ('' if unknown)."""
    kind = _EXTENSION_TYPES.get(path.suffix.lower())
    return kind.value if kind else ""


def _require_api_key(model: str) -> None:
    try:
        validate_api_key(model)
    except EnvironmentError as exc:
        console.print(err_no_api_key(str(exc)))
        raise typer.Exit(1)
