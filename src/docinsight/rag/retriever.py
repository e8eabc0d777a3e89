"""Dense retriever: embed the question, rank chunks by cosine similarity.

Scopes:
  retrieve_for_user()     every embedded chunk of the owner's documents
  retrieve_in_document()  embedded chunks of one document

Ordering: similarity descending, ties broken by chunk position ascending
(then chunk rowid), so equal scores always come back in document order.

Only chunks embedded by the gateway model, at the query dimension, are
compared. Similarity is cosine clamped to [0, 1].
"""

from __future__ import annotations

from dataclasses import dataclass

from docinsight.db.repository import Repository
from docinsight.db.vectors import model_to_slug
from docinsight.ingest.embedding import EmbeddingGateway


@dataclass
class RetrievedChunk:
    """A chunk returned by the retriever.

    Attributes:
        content: Chunk text.
        filename: Original filename of the owning document.
        similarity: Cosine similarity to the question (higher = more relevant).
        document_id: Owning document.
        chunk_index: Position of the chunk inside its document.
    """

    content: str
    filename: str
    similarity: float
    document_id: int
    chunk_index: int


class Retriever:
    """Top-K similarity search over stored chunk embeddings."""

    def __init__(self, repo: Repository, gateway: EmbeddingGateway) -> None:
        self._repo = repo
        self._gateway = gateway

    def retrieve_for_user(self, question: str, owner_id: int, top_k: int) -> list[RetrievedChunk]:
        """Return up to *top_k* of *owner_id*'s chunks most similar to *question*.

        Raises:
            ValueError: If *top_k* is not a positive integer.
        """
        _validate_top_k(top_k)
        query_blob = self._embed_query(question)
        return _to_retrieved(
            self._repo.search_similar(query_blob, top_k, owner_id=owner_id, model=self._model)
        )

    def retrieve_in_document(
        self, document_id: int, question: str, top_k: int
    ) -> list[RetrievedChunk]:
        """Return up to *top_k* chunks of *document_id* most similar to *question*.

        Raises:
            ValueError: If *top_k* is not a positive integer.
        """
        _validate_top_k(top_k)
        query_blob = self._embed_query(question)
        return _to_retrieved(
            self._repo.search_similar(
                query_blob, top_k, document_id=document_id, model=self._model
            )
        )

    @property
    def _model(self) -> str:
        return model_to_slug(self._gateway.model)

    def _embed_query(self, question: str) -> bytes:
        return self._gateway.encode(self._gateway.embed(question))


def _validate_top_k(top_k: int) -> None:
    if isinstance(top_k, bool) or not isinstance(top_k, int) or top_k < 1:
        raise ValueError(f"top_k must be a positive integer, got {top_k!r}")


def _to_retrieved(rows) -> list[RetrievedChunk]:
    return [
        RetrievedChunk(
            content=chunk.text,
            filename=filename,
            similarity=similarity,
            document_id=chunk.document_id,
            chunk_index=chunk.chunk_index,
        )
        for chunk, filename, similarity in rows
    ]
