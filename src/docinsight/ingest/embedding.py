"""Embedding gateway — LiteLLM embeddings plus sqlite-vec storable form."""

from __future__ import annotations

from dataclasses import dataclass

from docinsight.db.vectors import serialize
from docinsight.rag.llm_client import embed


@dataclass
class EmbeddingConfig:
    """Configuration for embedding generation."""

    model: str = "openai/text-embedding-3-small"
    num_retries: int = 3


class EmbeddingGateway:
    """Turn text into vectors and vectors into what the chunk store keeps.

    Shared by ingestion (one call per chunk) and retrieval (one call per
    question) so both sides always use the same model.
    """

    def __init__(self, config: EmbeddingConfig | None = None) -> None:
        self._config = config or EmbeddingConfig()

    @property
    def model(self) -> str:
        return self._config.model

    def embed(self, text: str) -> list[float]:
        """Return the embedding of *text*.

        Raises:
            ValueError: If the provider returns an empty vector.
        """
        vector = embed(self._config.model, text, num_retries=self._config.num_retries)
        if not vector:
            raise ValueError(f"Embedding model '{self._config.model}' returned an empty vector")
        return [float(v) for v in vector]

    def encode(self, vector: list[float]) -> bytes:
        """Return the float32 blob stored alongside a chunk."""
        return serialize(vector)
