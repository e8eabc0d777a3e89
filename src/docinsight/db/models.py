"""Domain models for the docinsight database layer."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


@dataclass
class Document:
    owner_id: int
    filename: str
    content_type: str
    storage_path: str  # opaque file-storage handle, not a filesystem path
    size_bytes: int
    created_at: str | None = None
    id: int | None = None  # set after insert


@dataclass
class Chunk:
    document_id: int
    chunk_index: int
    text: str
    embedding: list[float] | None = None
    embedding_blob: bytes | None = None  # float32 storable form of ``embedding``
    embedding_model: str | None = None  # model_to_slug() of the producing model
    created_at: str | None = None
    rowid: int | None = None  # set after insert; None for unsaved chunks

    @property
    def has_embedding(self) -> bool:
        return self.embedding_blob is not None


@dataclass(frozen=True)
class SourceAttribution:
    """Links an answer back to one chunk that grounded it."""

    filename: str
    similarity: float
    document_id: int

    def to_dict(self) -> dict:
        return {
            "filename": self.filename,
            "similarity": self.similarity,
            "document_id": self.document_id,
        }

    @classmethod
    def from_dict(cls, data: dict) -> SourceAttribution:
        return cls(
            filename=str(data["filename"]),
            similarity=float(data["similarity"]),
            document_id=int(data["document_id"]),
        )


class MessageKind(str, Enum):
    QUESTION = "QUESTION"
    ANSWER = "ANSWER"


@dataclass
class Message:
    conversation_id: int
    kind: MessageKind
    content: str
    sources: list[SourceAttribution] = field(default_factory=list)
    created_at: str | None = None
    id: int | None = None


@dataclass
class Conversation:
    owner_id: int
    title: str
    created_at: str | None = None
    updated_at: str | None = None
    messages: list[Message] = field(default_factory=list)  # empty in list views
    message_count: int = 0
    id: int | None = None
