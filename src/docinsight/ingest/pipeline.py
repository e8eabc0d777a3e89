"""Document ingestion and removal.

ingest():  store file → document row → extract → chunk → embed + persist each chunk
remove():  delete chunks → delete file (best effort) → delete document row

Failure policy:
  - Storage write fails         → StorageFailure, nothing persisted.
  - Document row insert fails   → stored file deleted, StorageFailure.
  - Extraction fails            → IngestionFailure; document + file stay, 0 chunks.
  - Embedding chunk N fails     → IngestionFailure; chunks 0..N-1 stay, rest skipped.

A document left with zero or partial chunks is rebuilt with reprocess(),
which clears its chunks first so positions stay contiguous from zero.
"""

from __future__ import annotations

import sqlite3
from dataclasses import dataclass
from datetime import datetime, timezone

from docinsight.db.models import Chunk, Document
from docinsight.db.repository import Repository
from docinsight.db.vectors import model_to_slug
from docinsight.errors import ExtractionFailure, IngestionFailure, NotFound, StorageFailure
from docinsight.ingest.base import ContentType
from docinsight.ingest.chunker import TextChunker, estimate_tokens
from docinsight.ingest.embedding import EmbeddingGateway
from docinsight.ingest.extractor import extract
from docinsight.storage import FileStorage
from docinsight.utils.logging import get_logger

_logger = get_logger(__name__)


@dataclass
class DocumentSummary:
    """A document together with how many chunks it currently has."""

    document: Document
    chunk_count: int


@dataclass
class OwnerStats:
    documents: int
    chunks: int


class DocumentIngestor:
    """Drive a document through storage, extraction, chunking and embedding.

    Args:
        repo:    Repository bound to this worker's connection.
        storage: File store for the raw uploads.
        gateway: Embedding gateway used for every chunk.
        chunker: Chunker; defaults to 2000-character windows, 200 overlap.
    """

    def __init__(
        self,
        repo: Repository,
        storage: FileStorage,
        gateway: EmbeddingGateway,
        chunker: TextChunker | None = None,
    ) -> None:
        self._repo = repo
        self._storage = storage
        self._gateway = gateway
        self._chunker = chunker or TextChunker()

    # ------------------------------------------------------------------
    # Ingest
    # ------------------------------------------------------------------

    def ingest(self, data: bytes, filename: str, content_type: str, owner_id: int) -> Document:
        """Store, register, and index an uploaded file.

        Returns:
            The persisted Document (with ``id`` and ``created_at`` set).

        Raises:
            ValueError: If *data* is empty.
            UnsupportedFormat: If *content_type* is not supported.
            StorageFailure: If the file or the document row cannot be written.
            IngestionFailure: If extraction or embedding fails.
        """
        if not data:
            raise ValueError("Cannot ingest an empty file")
        kind = ContentType.parse(content_type)

        handle = self._storage.store(data, filename)

        document = Document(
            owner_id=owner_id,
            filename=filename,
            content_type=kind.value,
            storage_path=handle,
            size_bytes=len(data),
            created_at=_utcnow(),
        )
        try:
            document.id = self._repo.add_document(document)
        except sqlite3.Error as exc:
            self._storage.delete(handle)
            _logger.error("document_create_failed", filename=filename, error=str(exc))
            raise StorageFailure(f"Failed to record document '{filename}'") from exc

        _logger.info(
            "document_created",
            document_id=document.id,
            owner_id=owner_id,
            content_type=kind.value,
            size_bytes=len(data),
        )

        count = self._index(document)
        _logger.info("document_ingested", document_id=document.id, chunks=count)
        return document

    def reprocess(self, document_id: int) -> int:
        """Drop any chunks of *document_id* and index its stored file again.

        Returns:
            Number of chunks persisted.

        Raises:
            NotFound: If the document does not exist.
            IngestionFailure: If extraction or embedding fails again.
        """
        document = self.get_document(document_id)
        removed = self._repo.delete_chunks_by_document(document_id)
        _logger.info("document_reprocess", document_id=document_id, cleared_chunks=removed)
        count = self._index(document)
        _logger.info("document_ingested", document_id=document_id, chunks=count)
        return count

    def _index(self, document: Document) -> int:
        """Extract, chunk and embed *document*; return the number of chunks stored."""
        try:
            path = self._storage.read_path(document.storage_path)
            text = extract(path, document.content_type)
        except (ExtractionFailure, StorageFailure) as exc:
            _logger.error("ingestion_failed", document_id=document.id, stage="extract")
            raise IngestionFailure(
                f"Could not extract text from '{document.filename}': {exc}",
                document_id=document.id,
            ) from exc

        segments = self._chunker.chunk(text)
        _logger.info(
            "text_chunked",
            document_id=document.id,
            chunks=len(segments),
            estimated_tokens=estimate_tokens(text),
        )

        model = model_to_slug(self._gateway.model)
        for index, segment in enumerate(segments):
            try:
                vector = self._gateway.embed(segment)
                self._repo.add_chunk(
                    Chunk(
                        document_id=document.id,
                        chunk_index=index,
                        text=segment,
                        embedding=vector,
                        embedding_blob=self._gateway.encode(vector),
                        embedding_model=model,
                        created_at=_utcnow(),
                    )
                )
            except Exception as exc:
                _logger.error(
                    "ingestion_failed",
                    document_id=document.id,
                    stage="embed",
                    chunk_index=index,
                    persisted=index,
                    error=str(exc),
                )
                raise IngestionFailure(
                    f"Embedding failed at chunk {index} of '{document.filename}': {exc}",
                    document_id=document.id,
                ) from exc

        return len(segments)

    # ------------------------------------------------------------------
    # Remove
    # ------------------------------------------------------------------

    def remove(self, document_id: int) -> None:
        """Delete a document, its chunks and its stored file.

        A file that cannot be deleted is logged and left behind; it never
        blocks removal of the document row.

        Raises:
            NotFound: If the document does not exist.
        """
        document = self.get_document(document_id)

        chunks = self._repo.delete_chunks_by_document(document_id)
        file_deleted = self._storage.delete(document.storage_path)
        self._repo.delete_document(document_id)

        _logger.info(
            "document_removed",
            document_id=document_id,
            chunks=chunks,
            file_deleted=file_deleted,
        )

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_document(self, document_id: int) -> Document:
        """Return a document by id.

        Raises:
            NotFound: If the document does not exist.
        """
        document = self._repo.get_document(document_id)
        if document is None:
            raise NotFound("Document", document_id)
        return document

    def list_documents(self, owner_id: int) -> list[DocumentSummary]:
        """Return *owner_id*'s documents, newest first, with chunk counts."""
        return [self.describe(d) for d in self._repo.list_documents_by_owner(owner_id)]

    def describe(self, document: Document) -> DocumentSummary:
        return DocumentSummary(
            document=document,
            chunk_count=self._repo.count_chunks_by_document(document.id),
        )

    def stats(self, owner_id: int) -> OwnerStats:
        return OwnerStats(
            documents=self._repo.count_documents_by_owner(owner_id),
            chunks=self._repo.count_chunks_by_owner(owner_id),
        )


def _utcnow() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="microseconds")
