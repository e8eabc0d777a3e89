"""docinsight rich error messages — actionable feedback.

Every error shown to the user states what went wrong and the action that
fixes it.

Usage:
    from docinsight.cli.errors import err_no_db
    console.print(err_no_db(".docinsight.db"))
    raise typer.Exit(1)
"""

from __future__ import annotations

from docinsight.ingest.base import ContentType


def err_no_api_key(detail: str) -> str:
    """Missing provider API key (message comes from validate_api_key)."""
    return f"[red]Error:[/] {detail}"


def err_no_db(db_path: str = ".docinsight.db") -> str:
    return (
        f"[red]Error:[/] No database found at '{db_path}'.\n"
        "  Run:  docinsight init"
    )


def err_file_not_found(path: str) -> str:
    return (
        f"[red]Error:[/] File not found: '{path}'.\n"
        "  Check the path and try again."
    )


def err_unsupported_format(content_type: str | None) -> str:
    supported = "\n".join(f"    {ct.value}" for ct in ContentType)
    return (
        f"[red]Error:[/] Unsupported content type: '{content_type}'.\n"
        f"  Supported types:\n{supported}\n"
        "  Pass --content-type explicitly if the extension is misleading."
    )


def err_storage(detail: str) -> str:
    return (
        f"[red]Error:[/] Storage failure: {detail}\n"
        "  Check that the upload directory is writable and retry."
    )


def err_ingestion(detail: str, document_id: int | None) -> str:
    retry = (
        f"  Retry with:  docinsight reprocess --id {document_id}"
        if document_id is not None
        else "  Retry the upload."
    )
    return f"[red]Error:[/] Ingestion failed: {detail}\n{retry}"


def err_not_found(kind: str, entity_id: object) -> str:
    hint = "docinsight documents" if kind == "Document" else "docinsight conversations list"
    return (
        f"[yellow]{kind} not found:[/] {entity_id}\n"
        f"  Run:  {hint}  to see what is available."
    )

