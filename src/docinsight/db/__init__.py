"""docinsight database layer."""

from docinsight.db.connection import Database, open_database
from docinsight.db.migrations import MIGRATIONS, run_migrations
from docinsight.db.repository import Repository
from docinsight.db.schema import initialize

__all__ = [
    "Database",
    "open_database",
    "initialize",
    "run_migrations",
    "MIGRATIONS",
    "Repository",
]
