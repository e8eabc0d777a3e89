"""Tests for docinsight ingest / reprocess commands."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import patch

import pytest
from typer.testing import CliRunner

from docinsight.cli.ingest import guess_content_type
from docinsight.cli.main import app
from docinsight.db.connection import open_database
from docinsight.db.repository import Repository

runner = CliRunner()


def _documents(db_path: Path, owner: int = 1):
    conn = open_database(db_path)
    try:
        repo = Repository(conn)
        return [(d, repo.count_chunks_by_document(d.id)) for d in repo.list_documents_by_owner(owner)]
    finally:
        conn.close()


# ---------------------------------------------------------------------------
# guess_content_type
# ---------------------------------------------------------------------------


@pytest.mark.parametrize("name,expected", [
    ("a.pdf", "application/pdf"),
    ("A.PDF", "application/pdf"),
    ("memo.docx", "application/vnd.openxmlformats-officedocument.wordprocessingml.document"),
    ("notes.txt", "text/plain"),
    ("README.md", "text/plain"),
    ("photo.png", ""),
    ("noext", ""),
])
def test_guess_content_type(name, expected):
    assert guess_content_type(Path(name)) == expected


# ---------------------------------------------------------------------------
# docinsight ingest
# ---------------------------------------------------------------------------


def test_ingest_text_file(cli_env: Path, fake_embed) -> None:
    src = cli_env / "notes.txt"
    src.write_text("The notice period is thirty days. " * 10, encoding="utf-8")

    result = runner.invoke(app, ["ingest", "--file", str(src), "--owner", "1"])

    assert result.exit_code == 0, result.output
    assert "document 1" in result.output
    docs = _documents(cli_env / ".docinsight.db")
    assert len(docs) == 1
    doc, chunks = docs[0]
    assert doc.filename == "notes.txt"
    assert chunks == 1
    assert (cli_env / "uploads" / doc.storage_path).exists()


def test_ingest_creates_db_if_missing(cli_env: Path, fake_embed) -> None:
    src = cli_env / "a.txt"
    src.write_text("hello", encoding="utf-8")
    db = cli_env / "custom.db"

    result = runner.invoke(app, ["ingest", "-f", str(src), "-o", "2", "--db", str(db)])

    assert result.exit_code == 0, result.output
    assert db.exists()


def test_ingest_missing_file(cli_env: Path) -> None:
    result = runner.invoke(app, ["ingest", "--file", "nope.pdf", "--owner", "1"])
    assert result.exit_code == 1
    assert "File not found" in result.output


def test_ingest_empty_file(cli_env: Path) -> None:
    src = cli_env / "empty.txt"
    src.write_bytes(b"")
    result = runner.invoke(app, ["ingest", "--file", str(src), "--owner", "1"])
    assert result.exit_code == 1
    assert "empty" in result.output


def test_ingest_unsupported_extension(cli_env: Path, fake_embed) -> None:
    src = cli_env / "photo.png"
    src.write_bytes(b"\x89PNG")

    result = runner.invoke(app, ["ingest", "--file", str(src), "--owner", "1"])

    assert result.exit_code == 1
    assert "Unsupported content type" in result.output
    assert "text/plain" in result.output


def test_ingest_explicit_content_type(cli_env: Path, fake_embed) -> None:
    src = cli_env / "notes.data"
    src.write_text("plain text body", encoding="utf-8")

    result = runner.invoke(
        app, ["ingest", "--file", str(src), "--owner", "1", "--content-type", "text/plain"]
    )

    assert result.exit_code == 0, result.output


def test_ingest_missing_api_key(cli_env: Path, monkeypatch) -> None:
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    src = cli_env / "a.txt"
    src.write_text("hello", encoding="utf-8")

    result = runner.invoke(app, ["ingest", "--file", str(src), "--owner", "1"])

    assert result.exit_code == 1
    assert "OPENAI_API_KEY" in result.output


def test_ingest_embedding_failure_suggests_reprocess(cli_env: Path) -> None:
    src = cli_env / "a.txt"
    src.write_text("hello", encoding="utf-8")

    with patch("docinsight.ingest.embedding.embed", side_effect=RuntimeError("rate limited")):
        result = runner.invoke(app, ["ingest", "--file", str(src), "--owner", "1"])

    assert result.exit_code == 1
    assert "Ingestion failed" in result.output
    assert "reprocess --id 1" in result.output
    docs = _documents(cli_env / ".docinsight.db")
    assert [chunks for _, chunks in docs] == [0]


# ---------------------------------------------------------------------------
# docinsight reprocess
# ---------------------------------------------------------------------------


def test_reprocess_after_failure(cli_env: Path) -> None:
    src = cli_env / "a.txt"
    src.write_text("hello there", encoding="utf-8")
    with patch("docinsight.ingest.embedding.embed", side_effect=RuntimeError("down")):
        runner.invoke(app, ["ingest", "--file", str(src), "--owner", "1"])

    with patch("docinsight.ingest.embedding.embed", return_value=[0.5, 0.5]):
        result = runner.invoke(app, ["reprocess", "--id", "1"])

    assert result.exit_code == 0, result.output
    assert "re-indexed (1 chunks)" in result.output


def test_reprocess_unknown_document(db_path: Path) -> None:
    result = runner.invoke(app, ["reprocess", "--id", "42"])
    assert result.exit_code == 1
    assert "Document not found" in result.output


def test_reprocess_no_db(cli_env: Path) -> None:
    result = runner.invoke(app, ["reprocess", "--id", "1"])
    assert result.exit_code == 1
    assert "docinsight init" in result.output
