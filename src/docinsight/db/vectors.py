"""Embedding vector <-> sqlite-vec float32 blob conversion."""

from __future__ import annotations

import re
import struct

import sqlite_vec


def serialize(vector: list[float]) -> bytes:
    """Pack *vector* into the compact float32 blob sqlite-vec functions accept.

    Raises:
        ValueError: If *vector* is empty.
    """
    if not vector:
        raise ValueError("Cannot serialize an empty embedding vector")
    return sqlite_vec.serialize_float32(vector)


def deserialize(blob: bytes) -> list[float]:
    """Unpack a float32 blob produced by serialize()."""
    if len(blob) % 4:
        raise ValueError(f"Embedding blob length {len(blob)} is not a multiple of 4")
    return list(struct.unpack(f"{len(blob) // 4}f", blob))


def dimensions(blob: bytes) -> int:
    """Return the number of float32 components stored in *blob*."""
    return len(blob) // 4


def model_to_slug(model: str) -> str:
    """Normalise a provider/model string into the key stored per chunk.

    Examples:
        "openai/text-embedding-3-small" -> "openai_text_embedding_3_small"
        "ollama/nomic-embed-text"       -> "ollama_nomic_embed_text"
    """
    return re.sub(r"[^a-z0-9]", "_", model.lower())
