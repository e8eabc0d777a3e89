"""Shared pytest fixtures."""

from __future__ import annotations

import math

import pytest

from docinsight.db.connection import Database
from docinsight.db.schema import initialize
from docinsight.db.vectors import serialize


@pytest.fixture
def tmp_db(tmp_path):
    """File-based DB in tmp_path with schema initialized, closed after test."""
    db = Database(tmp_path / ".docinsight.db")
    conn = db.connect()
    initialize(conn)
    yield conn
    conn.close()


class FakeGateway:
    """Deterministic stand-in for EmbeddingGateway.

    Texts listed in *vectors* get that vector; anything else maps to a
    direction derived from its length. With *fail_at* set, that call
    (0-based) raises instead of returning.
    """

    model = "test/fake-embedding"

    def __init__(
        self,
        vectors: dict[str, list[float]] | None = None,
        dims: int = 4,
        fail_at: int | None = None,
    ) -> None:
        self.vectors = vectors or {}
        self.dims = dims
        self.fail_at = fail_at
        self.calls: list[str] = []

    def embed(self, text: str) -> list[float]:
        call = len(self.calls)
        self.calls.append(text)
        if call == self.fail_at:
            raise RuntimeError("provider unavailable")
        if text in self.vectors:
            return list(self.vectors[text])
        angle = (len(text) % 97) / 97 * math.pi
        return [math.cos(angle), math.sin(angle)] + [0.0] * (self.dims - 2)

    def encode(self, vector: list[float]) -> bytes:
        return serialize(vector)


@pytest.fixture
def make_gateway():
    """Factory for FakeGateway instances: ``make_gateway(vectors, fail_at=2)``."""
    return FakeGateway
