"""docinsight ask — answer a question from uploaded documents.

Two modes:
  default       search all of the owner's documents, print answer + sources
  --document N  search one document and stream the answer as it arrives

--top-k overrides the configured chunk count in either mode.

--save starts a new conversation with the exchange; --conversation N appends
it to an existing one instead.

Usage:
  docinsight ask "What is the notice period?" --owner 1
  docinsight ask "Summarise section 3" --owner 1 --document 12
  docinsight ask "And the renewal terms?" --owner 1 --conversation 4
"""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from docinsight.app import Services
from docinsight.cli.context import console, open_services
from docinsight.cli.errors import err_no_api_key, err_not_found
from docinsight.db.models import SourceAttribution
from docinsight.errors import NotFound
from docinsight.rag.llm_client import validate_api_key


def ask_cmd(
    question: Annotated[str, typer.Argument(help="Question to answer.")],
    owner: Annotated[
        int,
        typer.Option("--owner", "-o", help="Asking user id."),
    ],
    document: Annotated[
        int | None,
        typer.Option("--document", "-d", help="Restrict to one document and stream."),
    ] = None,
    conversation: Annotated[
        int | None,
        typer.Option("--conversation", "-c", help="Append the exchange to this conversation."),
    ] = None,
    save: Annotated[
        bool,
        typer.Option("--save", help="Start a new conversation with this exchange."),
    ] = False,
    top_k: Annotated[
        int | None,
        typer.Option("--top-k", "-k", help="Chunks to retrieve (default: from config)."),
    ] = None,
    db: Annotated[
        Path | None,
        typer.Option("--db", help="Path to the database (default: from config)."),
    ] = None,
) -> None:
    """Ask a question about your uploaded documents."""
    if not question.strip():
        console.print("[red]Error:[/] Question must not be empty.")
        raise typer.Exit(1)

    with open_services(db) as services:
        cfg = services.config
        for model in (cfg.embedding.model, cfg.generation.model):
            try:
                validate_api_key(model)
            except EnvironmentError as exc:
                console.print(err_no_api_key(str(exc)))
                raise typer.Exit(1)

        # Check the conversation before spending tokens on an answer.
        if conversation is not None:
            _require_conversation(services, conversation, owner)

        try:
            if document is not None:
                text, sources = _stream_answer(services, question, document, owner, top_k)
            else:
                text, sources = _batch_answer(services, question, owner, top_k)
        except ValueError as exc:
            console.print(f"[red]Error:[/] {exc}")
            raise typer.Exit(1)

        if conversation is not None:
            services.ledger.append(conversation, owner, question, text, sources)
            console.print(f"\n[dim]Added to conversation {conversation}.[/]")
        elif save:
            conv = services.ledger.create(owner, question, text, sources)
            console.print(f"\n[dim]Saved as conversation {conv.id}: {conv.title}[/]")


def _batch_answer(
    services: Services, question: str, owner: int, top_k: int | None
) -> tuple[str, list[SourceAttribution]]:
    k = top_k if top_k is not None else services.config.retrieval.top_k
    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        transient=True,
        console=console,
    ) as prog:
        prog.add_task(f"Answering with {services.config.generation.model}…", total=None)
        answer = services.synthesizer.answer(question, owner, k)

    console.print(answer.text)
    if answer.sources:
        console.print(_sources_table(answer.sources))
    else:
        console.print("\n[dim]No matching excerpts in your documents.[/]")
    return answer.text, answer.sources


def _stream_answer(
    services: Services, question: str, document_id: int, owner: int, top_k: int | None
) -> tuple[str, list[SourceAttribution]]:
    try:
        fragments = services.synthesizer.answer_stream(question, document_id, owner, top_k)
    except NotFound as exc:
        console.print(err_not_found(exc.kind, exc.entity_id))
        raise typer.Exit(1)

    parts: list[str] = []
    for fragment in fragments:
        parts.append(fragment)
        console.print(fragment, end="", markup=False, highlight=False, soft_wrap=True)
    console.print()
    return "".join(parts), fragments.sources


def _require_conversation(services: Services, conversation_id: int, owner: int) -> None:
    try:
        services.ledger.get(conversation_id, owner)
    except NotFound as exc:
        console.print(err_not_found(exc.kind, exc.entity_id))
        raise typer.Exit(1)


def _sources_table(sources: list[SourceAttribution]) -> Table:
    table = Table(title="Sources", show_lines=False)
    table.add_column("#", justify="right")
    table.add_column("Document", justify="right")
    table.add_column("Filename")
    table.add_column("Similarity", justify="right")
    for i, src in enumerate(sources, start=1):
        table.add_row(str(i), str(src.document_id), src.filename, f"{src.similarity:.3f}")
    return table
