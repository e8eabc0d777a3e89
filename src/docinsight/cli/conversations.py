"""docinsight conversations / cleanup — saved question-answer threads.

Commands:
  docinsight conversations list --owner 1        — threads, most recent first
  docinsight conversations show 4 --owner 1      — full thread with sources
  docinsight conversations delete 4 --owner 1    — delete a thread
  docinsight cleanup                             — expire stale threads
"""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer
from rich.table import Table

from docinsight.cli.context import console, open_services
from docinsight.cli.errors import err_not_found
from docinsight.db.models import MessageKind
from docinsight.errors import NotFound

conversations_app = typer.Typer(
    name="conversations",
    help="Manage saved conversations (list, show, delete).",
    add_completion=False,
)

_OwnerOpt = Annotated[int, typer.Option("--owner", "-o", help="Owning user id.")]
_DbOpt = Annotated[
    Path | None,
    typer.Option("--db", help="Path to the database (default: from config)."),
]


@conversations_app.command("list")
def conversations_list_cmd(owner: _OwnerOpt, db: _DbOpt = None) -> None:
    """List conversations, most recently updated first."""
    with open_services(db) as services:
        conversations = services.ledger.list(owner)

    if not conversations:
        console.print(f"[dim]No conversations for owner {owner}.[/]")
        raise typer.Exit(0)

    table = Table(title="Conversations", show_header=True, header_style="bold")
    table.add_column("ID", justify="right")
    table.add_column("Title", style="bold")
    table.add_column("Messages", justify="right")
    table.add_column("Updated")

    for conv in conversations:
        table.add_row(
            str(conv.id),
            conv.title,
            str(conv.message_count),
            (conv.updated_at or "")[:19].replace("T", " "),
        )

    console.print(table)


@conversations_app.command("show")
def conversations_show_cmd(
    conversation_id: Annotated[int, typer.Argument(help="Conversation id.")],
    owner: _OwnerOpt,
    db: _DbOpt = None,
) -> None:
    """Print a conversation's messages in order."""
    with open_services(db) as services:
        try:
            conv = services.ledger.get(conversation_id, owner)
        except NotFound as exc:
            console.print(err_not_found(exc.kind, exc.entity_id))
            raise typer.Exit(1)

    console.print(f"[bold]{conv.title}[/]  [dim](#{conv.id}, started {conv.created_at})[/]\n")
    for message in conv.messages:
        if message.kind is MessageKind.QUESTION:
            console.print(f"[bold cyan]Q:[/] {message.content}")
            continue
        console.print(f"[bold green]A:[/] {message.content}")
        for src in message.sources:
            console.print(f"   [dim]↳ {src.filename} ({src.similarity:.3f})[/]")
        console.print()


@conversations_app.command("delete")
def conversations_delete_cmd(
    conversation_id: Annotated[int, typer.Argument(help="Conversation id.")],
    owner: _OwnerOpt,
    db: _DbOpt = None,
) -> None:
    """Delete a conversation and its messages."""
    with open_services(db) as services:
        try:
            services.ledger.delete(conversation_id, owner)
        except NotFound as exc:
            console.print(err_not_found(exc.kind, exc.entity_id))
            raise typer.Exit(1)

    console.print(f"[green]✓[/] Deleted conversation {conversation_id}")


def cleanup_cmd(db: _DbOpt = None) -> None:
    """Delete conversations not updated within the retention window.

    Schedule daily, e.g. from cron: ``0 3 * * * docinsight cleanup``.
    """
    with open_services(db) as services:
        deleted = services.ledger.cleanup_expired()
        hours = services.config.conversations.retention_hours

    console.print(f"[green]✓[/] {deleted} conversation(s) older than {hours}h removed")
