"""Tests for the docinsight CLI entry point."""

from __future__ import annotations

from typer.testing import CliRunner

from docinsight.cli.main import app

runner = CliRunner()


def test_version_flag() -> None:
    result = runner.invoke(app, ["--version"])
    assert result.exit_code == 0
    assert result.output.startswith("docinsight ")


def test_version_command() -> None:
    result = runner.invoke(app, ["version"])
    assert result.exit_code == 0
    assert "docinsight" in result.output


def test_help_lists_commands() -> None:
    result = runner.invoke(app, ["--help"])
    assert result.exit_code == 0
    for command in ("init", "ingest", "reprocess", "documents", "remove", "ask",
                    "cleanup", "conversations"):
        assert command in result.output
