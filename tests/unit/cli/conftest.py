"""Fixtures shared by the CLI command tests."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import patch

import pytest

from docinsight.db.connection import open_database


@pytest.fixture(autouse=True)
def cli_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Run each command in an empty project dir with a fake API key.

    Logging stays unconfigured so structlog never binds to the runner's
    temporary output streams.
    """
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr("docinsight.config._GLOBAL_CONFIG_PATH", tmp_path / "no-global.yaml")
    monkeypatch.setattr("docinsight.cli.context.configure_logging", lambda *a, **k: None)
    monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
    for var in ("DOCINSIGHT_DB", "DOCINSIGHT_UPLOAD_DIR", "DOCINSIGHT_GENERATION_MODEL",
                "DOCINSIGHT_EMBEDDING_MODEL", "DOCINSIGHT_LOG_LEVEL"):
        monkeypatch.delenv(var, raising=False)
    return tmp_path


@pytest.fixture
def db_path(cli_env: Path) -> Path:
    """An initialized database at the default location."""
    path = cli_env / ".docinsight.db"
    open_database(path).close()
    return path


@pytest.fixture
def fake_embed():
    """Every text embeds to the same unit vector."""
    with patch("docinsight.ingest.embedding.embed", return_value=[1.0, 0.0, 0.0]) as mock:
        yield mock
