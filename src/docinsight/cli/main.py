"""docinsight CLI entry point."""

from __future__ import annotations

import importlib.metadata
from typing import Annotated

import typer

from docinsight.cli.ask import ask_cmd
from docinsight.cli.conversations import cleanup_cmd, conversations_app
from docinsight.cli.documents import documents_cmd
from docinsight.cli.ingest import ingest_cmd, reprocess_cmd
from docinsight.cli.init import init_cmd
from docinsight.cli.remove import remove_cmd


def _installed_version() -> str:
    try:
        return importlib.metadata.version("docinsight")
    except importlib.metadata.PackageNotFoundError:
        return "dev"


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"docinsight {_installed_version()}")
        raise typer.Exit()


app = typer.Typer(
    name="docinsight",
    help=(
        "docinsight — question answering over your own documents.\n\n"
        "  docinsight ingest  Upload a PDF, DOCX or text file and index it.\n"
        "  docinsight ask     Answer a question from the indexed documents."
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
    """docinsight — question answering over your own documents."""


app.command("init")(init_cmd)
app.command("ingest")(ingest_cmd)
app.command("reprocess")(reprocess_cmd)
app.command("documents")(documents_cmd)
app.command("remove")(remove_cmd)
app.command("ask")(ask_cmd)
app.command("cleanup")(cleanup_cmd)
app.add_typer(conversations_app, name="conversations")


@app.command("version")
def version_cmd() -> None:
    """Show the installed docinsight version."""
    typer.echo(f"docinsight {_installed_version()}")


if __name__ == "__main__":
    app()
