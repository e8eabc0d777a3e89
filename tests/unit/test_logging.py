"""Tests for structlog configuration."""

from __future__ import annotations

import json
import logging

import pytest
import structlog

from docinsight.utils.logging import configure_logging, get_logger


@pytest.fixture(autouse=True)
def _reset_structlog():
    yield
    structlog.reset_defaults()
    logging.getLogger().handlers.clear()


def test_json_output_to_stderr(capsys):
    configure_logging("INFO", json_output=True)
    structlog.get_logger().info("document_created", document_id=3)

    captured = capsys.readouterr()
    assert captured.out == ""
    record = json.loads(captured.err.strip().splitlines()[-1])
    assert record["event"] == "document_created"
    assert record["document_id"] == 3
    assert record["level"] == "info"
    assert "timestamp" in record


def test_level_filters_lower_events(capsys):
    configure_logging("WARNING", json_output=True)
    log = structlog.get_logger()
    log.info("quiet")
    log.warning("loud")

    err = capsys.readouterr().err
    assert "quiet" not in err
    assert "loud" in err


def test_production_env_selects_json(capsys, monkeypatch):
    monkeypatch.setenv("DOCINSIGHT_ENV", "production")
    configure_logging("INFO")
    structlog.get_logger().info("rag_query", context_chunks=2)

    record = json.loads(capsys.readouterr().err.strip().splitlines()[-1])
    assert record["context_chunks"] == 2


def test_stdlib_logging_bridged(capsys):
    configure_logging("INFO", json_output=True)
    logging.getLogger("litellm").warning("retrying request")

    err = capsys.readouterr().err
    assert "retrying request" in err


def test_get_logger_configures_on_first_use():
    structlog.reset_defaults()
    assert not structlog.is_configured()
    get_logger("docinsight.test")
    assert structlog.is_configured()
