"""docinsight init — project scaffold.

Creates:
  .docinsight.db     — empty database with schema (path from config)
  docinsight.yaml    — project config with the effective defaults
  uploads/           — upload directory (path from config)
"""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer

from docinsight.cli.context import console, load_cli_config
from docinsight.config import write_project_config
from docinsight.db.connection import open_database

_DEFAULT_PROJECT_DIR = Path(".")


def init_cmd(
    project_dir: Annotated[
        Path,
        typer.Argument(help="Directory to initialize. Defaults to current directory."),
    ] = _DEFAULT_PROJECT_DIR,
) -> None:
    """Initialize a docinsight project directory."""
    project_dir = project_dir.resolve()
    project_dir.mkdir(parents=True, exist_ok=True)
    cfg = load_cli_config()

    console.print(f"\n[bold]Creating scaffold in {project_dir} …[/]\n")

    db_path = _under(project_dir, Path(cfg.storage.db))
    if db_path.exists():
        console.print(f"  [yellow]⚠[/]  {db_path.name} already exists — schema checked, data kept.")
    conn = open_database(db_path)
    conn.close()
    console.print(f"  [green]✓[/] {db_path.name}")

    config_path = project_dir / "docinsight.yaml"
    existed = config_path.exists()
    write_project_config(project_dir, cfg)
    console.print(f"  [green]✓[/] docinsight.yaml{' (kept existing)' if existed else ''}")

    upload_dir = _under(project_dir, Path(cfg.storage.upload_dir))
    upload_dir.mkdir(parents=True, exist_ok=True)
    console.print(f"  [green]✓[/] {upload_dir.name}/")

    console.print("\n[bold green]✓ Project initialized.[/]")
    console.print("\nNext steps:")
    console.print("  1. export OPENAI_API_KEY=...                     (provider key)")
    console.print("  2. docinsight ingest --file <path> --owner <id>  (upload a document)")
    console.print("  3. docinsight ask \"<question>\" --owner <id>      (ask about it)")


def _under(project_dir: Path, path: Path) -> Path:
    return path if path.is_absolute() else project_dir / path
