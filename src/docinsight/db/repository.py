"""Repository pattern for all docinsight database operations.

Single interface for: documents, chunks, similarity search, conversations and
their messages. Every write commits immediately; the store's per-statement
atomicity is the only concurrency control the core relies on.
"""

from __future__ import annotations

import json
import sqlite3

from docinsight.db.models import (
    Chunk,
    Conversation,
    Document,
    Message,
    MessageKind,
    SourceAttribution,
)
from docinsight.db.vectors import deserialize, dimensions

_DOCUMENT_COLUMNS = "id, owner_id, filename, content_type, storage_path, size_bytes, created_at"
_CHUNK_COLUMNS = "rowid, document_id, chunk_index, text, embedding, embedding_model, created_at"


class Repository:
    """Data access layer for all docinsight database entities.

    Wraps an open sqlite3.Connection. The connection is owned by the caller
    and must be closed after use.
    """

    def __init__(self, conn: sqlite3.Connection) -> None:
        """Initialise with an open database connection.

        Args:
            conn: An open sqlite3.Connection with sqlite-vec loaded and schema
                initialised (see docinsight.db.schema.initialize).
        """
        self._conn = conn

    # ------------------------------------------------------------------
    # Documents
    # ------------------------------------------------------------------

    def add_document(self, document: Document) -> int:
        """Insert a document record and return its new id.

        ``document.created_at`` must already be set by the caller.
        """
        cur = self._conn.execute(
            """
            INSERT INTO documents
                (owner_id, filename, content_type, storage_path, size_bytes, created_at)
            VALUES (?, ?, ?, ?, ?, ?)
            """,
            (
                document.owner_id,
                document.filename,
                document.content_type,
                document.storage_path,
                document.size_bytes,
                document.created_at,
            ),
        )
        self._conn.commit()
        return cur.lastrowid

    def get_document(self, document_id: int) -> Document | None:
        """Return a document by id, or None if not found."""
        row = self._conn.execute(
            f"SELECT {_DOCUMENT_COLUMNS} FROM documents WHERE id = ?",
            (document_id,),
        ).fetchone()
        return _row_to_document(row) if row else None

    def list_documents_by_owner(self, owner_id: int) -> list[Document]:
        """Return all documents of *owner_id*, newest first."""
        rows = self._conn.execute(
            f"SELECT {_DOCUMENT_COLUMNS} FROM documents WHERE owner_id = ? "
            "ORDER BY created_at DESC, id DESC",
            (owner_id,),
        ).fetchall()
        return [_row_to_document(r) for r in rows]

    def count_documents_by_owner(self, owner_id: int) -> int:
        return self._conn.execute(
            "SELECT COUNT(*) FROM documents WHERE owner_id = ?", (owner_id,)
        ).fetchone()[0]

    def delete_document(self, document_id: int) -> None:
        """Delete a document record by id.

        Chunks cascade through the foreign key, but callers delete them
        explicitly first so no chunk ever outlives its document row.
        """
        self._conn.execute("DELETE FROM documents WHERE id = ?", (document_id,))
        self._conn.commit()

    # ------------------------------------------------------------------
    # Chunks
    # ------------------------------------------------------------------

    def add_chunk(self, chunk: Chunk) -> int:
        """Insert a chunk and return its rowid. ``chunk.rowid`` is updated."""
        cur = self._conn.execute(
            """
            INSERT INTO chunks
                (document_id, chunk_index, text, embedding, embedding_model, created_at)
            VALUES (?, ?, ?, ?, ?, ?)
            """,
            (
                chunk.document_id,
                chunk.chunk_index,
                chunk.text,
                chunk.embedding_blob,
                chunk.embedding_model,
                chunk.created_at,
            ),
        )
        self._conn.commit()
        chunk.rowid = cur.lastrowid
        return cur.lastrowid

    def list_chunks(self, document_id: int) -> list[Chunk]:
        """Return all chunks of *document_id* ordered by position."""
        rows = self._conn.execute(
            f"SELECT {_CHUNK_COLUMNS} FROM chunks WHERE document_id = ? ORDER BY chunk_index",
            (document_id,),
        ).fetchall()
        return [_row_to_chunk(r) for r in rows]

    def count_chunks_by_document(self, document_id: int) -> int:
        return self._conn.execute(
            "SELECT COUNT(*) FROM chunks WHERE document_id = ?", (document_id,)
        ).fetchone()[0]

    def count_chunks_by_owner(self, owner_id: int) -> int:
        return self._conn.execute(
            """
            SELECT COUNT(*) FROM chunks c
            JOIN documents d ON d.id = c.document_id
            WHERE d.owner_id = ?
            """,
            (owner_id,),
        ).fetchone()[0]

    def delete_chunks_by_document(self, document_id: int) -> int:
        """Delete every chunk of *document_id*. Returns the number removed."""
        cur = self._conn.execute(
            "DELETE FROM chunks WHERE document_id = ?", (document_id,)
        )
        self._conn.commit()
        return cur.rowcount

    # ------------------------------------------------------------------
    # Similarity search
    # ------------------------------------------------------------------

    def search_similar(
        self,
        query_blob: bytes,
        limit: int,
        *,
        owner_id: int | None = None,
        document_id: int | None = None,
        model: str | None = None,
    ) -> list[tuple[Chunk, str, float]]:
        """Exact cosine search over embedded chunks in one scope.

        Exactly one of *owner_id* (all of a user's documents) or
        *document_id* (a single document) selects the eligible set.
        Only chunks whose vector has the query's dimension are compared,
        and with *model* set, only chunks embedded by that model (or with
        no recorded model). Zero-norm vectors have no cosine and are skipped.

        Returns:
            ``(chunk, filename, similarity)`` tuples, similarity in [0, 1]
            descending, ties broken by chunk position then rowid.
        """
        if (owner_id is None) == (document_id is None):
            raise ValueError("Pass exactly one of owner_id or document_id")

        dims = dimensions(query_blob)
        if owner_id is not None:
            filters, args = ["d.owner_id = ?"], [owner_id]
        else:
            filters, args = ["c.document_id = ?"], [document_id]
        if model is not None:
            filters.append("(c.embedding_model IS NULL OR c.embedding_model = ?)")
            args.append(model)
        where = " AND ".join(filters)

        # CASE keeps vec_distance_cosine away from vectors of another dimension.
        rows = self._conn.execute(
            f"""
            SELECT chunk_rowid AS rowid, document_id, chunk_index, text, embedding,
                   embedding_model, created_at, filename,
                   MAX(0.0, 1.0 - distance) AS similarity
            FROM (
                SELECT c.rowid AS chunk_rowid, c.document_id, c.chunk_index, c.text,
                       c.embedding, c.embedding_model, c.created_at, d.filename,
                       CASE WHEN vec_length(c.embedding) = ?
                            THEN vec_distance_cosine(c.embedding, ?)
                       END AS distance
                FROM chunks c
                JOIN documents d ON d.id = c.document_id
                WHERE c.embedding IS NOT NULL AND {where}
            )
            WHERE distance IS NOT NULL
            ORDER BY similarity DESC, chunk_index ASC, chunk_rowid ASC
            LIMIT ?
            """,  # noqa: S608
            (dims, query_blob, *args, limit),
        ).fetchall()
        return [(_row_to_chunk(r), r["filename"], float(r["similarity"])) for r in rows]

    # ------------------------------------------------------------------
    # Conversations
    # ------------------------------------------------------------------

    def add_conversation(self, conversation: Conversation) -> int:
        cur = self._conn.execute(
            """
            INSERT INTO conversations (owner_id, title, created_at, updated_at)
            VALUES (?, ?, ?, ?)
            """,
            (
                conversation.owner_id,
                conversation.title,
                conversation.created_at,
                conversation.updated_at,
            ),
        )
        self._conn.commit()
        return cur.lastrowid

    def get_conversation(self, conversation_id: int, owner_id: int) -> Conversation | None:
        """Return the conversation with its messages if *owner_id* owns it."""
        row = self._conn.execute(
            """
            SELECT id, owner_id, title, created_at, updated_at
            FROM conversations WHERE id = ? AND owner_id = ?
            """,
            (conversation_id, owner_id),
        ).fetchone()
        if row is None:
            return None
        conversation = _row_to_conversation(row)
        conversation.messages = self.list_messages(conversation.id)
        conversation.message_count = len(conversation.messages)
        return conversation

    def list_conversations(self, owner_id: int) -> list[Conversation]:
        """Return the conversations of *owner_id*, most recently updated first.

        Messages are not loaded; ``message_count`` is filled instead.
        """
        rows = self._conn.execute(
            """
            SELECT c.id, c.owner_id, c.title, c.created_at, c.updated_at,
                   COUNT(m.id) AS message_count
            FROM conversations c
            LEFT JOIN messages m ON m.conversation_id = c.id
            WHERE c.owner_id = ?
            GROUP BY c.id
            ORDER BY c.updated_at DESC, c.id DESC
            """,
            (owner_id,),
        ).fetchall()
        return [_row_to_conversation(r) for r in rows]

    def touch_conversation(self, conversation_id: int, updated_at: str) -> None:
        self._conn.execute(
            "UPDATE conversations SET updated_at = ? WHERE id = ?",
            (updated_at, conversation_id),
        )
        self._conn.commit()

    def delete_conversation(self, conversation_id: int) -> None:
        """Delete a conversation; its messages cascade."""
        self._conn.execute("DELETE FROM conversations WHERE id = ?", (conversation_id,))
        self._conn.commit()

    def delete_conversations_updated_before(self, cutoff: str) -> int:
        """Delete conversations with ``updated_at`` strictly before *cutoff*.

        Returns the number of conversations removed.
        """
        cur = self._conn.execute(
            "DELETE FROM conversations WHERE updated_at < ?", (cutoff,)
        )
        self._conn.commit()
        return cur.rowcount

    # ------------------------------------------------------------------
    # Messages
    # ------------------------------------------------------------------

    def add_message(self, message: Message) -> int:
        cur = self._conn.execute(
            """
            INSERT INTO messages (conversation_id, kind, content, sources, created_at)
            VALUES (?, ?, ?, ?, ?)
            """,
            (
                message.conversation_id,
                message.kind.value,
                message.content,
                json.dumps([s.to_dict() for s in message.sources]),
                message.created_at,
            ),
        )
        self._conn.commit()
        message.id = cur.lastrowid
        return cur.lastrowid

    def list_messages(self, conversation_id: int) -> list[Message]:
        """Return the messages of a conversation in insertion order."""
        rows = self._conn.execute(
            """
            SELECT id, conversation_id, kind, content, sources, created_at
            FROM messages WHERE conversation_id = ? ORDER BY id
            """,
            (conversation_id,),
        ).fetchall()
        return [_row_to_message(r) for r in rows]


# ------------------------------------------------------------------
# Row → model helpers
# ------------------------------------------------------------------

def _row_to_document(row: sqlite3.Row) -> Document:
    return Document(
        id=row["id"],
        owner_id=row["owner_id"],
        filename=row["filename"],
        content_type=row["content_type"],
        storage_path=row["storage_path"],
        size_bytes=row["size_bytes"],
        created_at=row["created_at"],
    )


def _row_to_chunk(row: sqlite3.Row) -> Chunk:
    blob = row["embedding"]
    return Chunk(
        rowid=row["rowid"],
        document_id=row["document_id"],
        chunk_index=row["chunk_index"],
        text=row["text"],
        embedding=deserialize(blob) if blob is not None else None,
        embedding_blob=blob,
        embedding_model=row["embedding_model"],
        created_at=row["created_at"],
    )


def _row_to_conversation(row: sqlite3.Row) -> Conversation:
    return Conversation(
        id=row["id"],
        owner_id=row["owner_id"],
        title=row["title"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
        message_count=row["message_count"] if "message_count" in row.keys() else 0,
    )


def _row_to_message(row: sqlite3.Row) -> Message:
    return Message(
        id=row["id"],
        conversation_id=row["conversation_id"],
        kind=MessageKind(row["kind"]),
        content=row["content"],
        sources=[SourceAttribution.from_dict(s) for s in json.loads(row["sources"])],
        created_at=row["created_at"],
    )
