"""Failure kinds raised by the docinsight core.

Every failure leaving the core is one of these classes so the calling layer
can tell them apart and map them to its own responses:

  UnsupportedFormat  content type outside the supported set (caller's fault)
  StorageFailure     file write/read problem (retryable infrastructure fault)
  ExtractionFailure  text could not be decoded from a stored file
  IngestionFailure   extraction or embedding failed during an ingest run
  NotFound           entity absent, or owned by someone else
"""

from __future__ import annotations


class DocInsightError(Exception):
    """Base class for all core failures."""


class UnsupportedFormat(DocInsightError):
    """Raised when a declared content type has no extractor."""

    def __init__(self, content_type: str | None) -> None:
        self.content_type = content_type
        super().__init__(f"Unsupported content type: {content_type!r}")


class StorageFailure(DocInsightError):
    """Raised when the file store or document store cannot complete a write."""


class ExtractionFailure(DocInsightError):
    """Raised when a supported file cannot be decoded into text."""


class IngestionFailure(DocInsightError):
    """Raised when an ingest run stops after the document record was created.

    The document (and any chunks persisted before the failure) stay in place;
    ``document_id`` identifies it so the caller can retry via reprocess().
    """

    def __init__(self, message: str, document_id: int | None = None) -> None:
        self.document_id = document_id
        super().__init__(message)


class NotFound(DocInsightError):
    """Raised when an entity is absent or not visible to the requester.

    Both causes produce the same message so existence is never leaked.
    """

    def __init__(self, kind: str, entity_id: object) -> None:
        self.kind = kind
        self.entity_id = entity_id
        super().__init__(f"{kind} {entity_id} not found")
