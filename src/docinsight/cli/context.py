"""Shared CLI plumbing: config, logging, database and service wiring."""

from __future__ import annotations

import sqlite3
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

import typer
from rich.console import Console

from docinsight.app import Services, build_services
from docinsight.cli.errors import err_no_db
from docinsight.config import ConfigError, DocInsightConfig, load_config
from docinsight.db.connection import open_database
from docinsight.utils.logging import configure_logging

console = Console()


def load_cli_config() -> DocInsightConfig:
    """Load config and configure logging; exit 1 on a bad config file."""
    try:
        cfg = load_config()
    except ConfigError as exc:
        console.print(f"[red]Error:[/] {exc}")
        raise typer.Exit(1)
    configure_logging(cfg.logging.level, json_output=cfg.logging.json)
    return cfg


def resolve_db(db: Path | None, cfg: DocInsightConfig) -> Path:
    return db if db is not None else Path(cfg.storage.db)


@contextmanager
def open_services(db: Path | None, *, must_exist: bool = True) -> Iterator[Services]:
    """Yield wired core services for one command; close the connection after."""
    cfg = load_cli_config()
    db_path = resolve_db(db, cfg)

    if must_exist and not db_path.exists():
        console.print(err_no_db(str(db_path)))
        raise typer.Exit(1)

    conn: sqlite3.Connection = open_database(db_path)
    try:
        yield build_services(conn, cfg)
    finally:
        conn.close()
