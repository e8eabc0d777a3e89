"""Answer synthesis: retrieved chunks + question → grounded LLM answer.

Batch:     answer()         one completion call, full text + source attributions
Streaming: answer_stream()  document-scoped, lazily yields model fragments;
                            sources are known before the first fragment

Both build the same grounding prompt. With no retrieved chunks the model is
still called with an empty context and left to say it lacks information.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field

from docinsight.db.models import SourceAttribution
from docinsight.db.repository import Repository
from docinsight.errors import NotFound
from docinsight.rag.llm_client import complete, stream
from docinsight.rag.retriever import RetrievedChunk, Retriever
from docinsight.utils.logging import get_logger

_logger = get_logger(__name__)

_SYSTEM_PROMPT = (
    "You are a document assistant. Answer the user's question using only the "
    "context excerpts provided. Cite the source filename when it helps. If the "
    "context does not contain the answer, say that you don't have enough "
    "information in the uploaded documents to answer."
)

_EMPTY_CONTEXT = "(no relevant excerpts were found)"


@dataclass
class SynthesizerConfig:
    model: str = "openai/gpt-4o-mini"
    max_tokens: int = 1024
    temperature: float = 0.2
    stream_top_k: int = 5  # chunks retrieved for answer_stream()


@dataclass
class Answer:
    text: str
    sources: list[SourceAttribution] = field(default_factory=list)


class StreamedAnswer(Iterator[str]):
    """Model fragments for one answer, plus the sources its prompt was built from."""

    def __init__(self, fragments: Iterator[str], sources: list[SourceAttribution]) -> None:
        self.sources = sources
        self._fragments = fragments

    def __next__(self) -> str:
        return next(self._fragments)

    def close(self) -> None:
        close = getattr(self._fragments, "close", None)
        if close is not None:
            close()


class AnswerSynthesizer:
    """Turn retrieved chunks plus a question into an answer."""

    def __init__(
        self,
        retriever: Retriever,
        repo: Repository,
        config: SynthesizerConfig | None = None,
    ) -> None:
        self._retriever = retriever
        self._repo = repo
        self._config = config or SynthesizerConfig()

    def answer(self, question: str, owner_id: int, top_k: int) -> Answer:
        """Answer *question* from all of *owner_id*'s documents.

        Sources are returned one per retrieved chunk, in retrieval order.
        """
        chunks = self._retriever.retrieve_for_user(question, owner_id, top_k)
        _record_query(len(chunks), mode="batch", owner_id=owner_id)

        text = complete(
            model=self._config.model,
            messages=build_messages(question, chunks),
            max_tokens=self._config.max_tokens,
            temperature=self._config.temperature,
        )
        return Answer(text=text, sources=_sources(chunks))

    def answer_stream(
        self,
        query: str,
        document_id: int,
        requester_id: int,
        top_k: int | None = None,
    ) -> StreamedAnswer:
        """Answer *query* from one document, fragment by fragment.

        Retrieval and the context-chunk telemetry happen now; the model call
        starts when the first fragment is requested. The returned iterator
        can be consumed once; closing it early releases the model stream.
        Its ``sources`` attribute is filled before iteration starts.

        *top_k* overrides the configured ``stream_top_k``.

        Raises:
            NotFound: If the document does not exist or *requester_id* does
                not own it.
            ValueError: If *top_k* is not a positive integer.
        """
        document = self._repo.get_document(document_id)
        if document is None or document.owner_id != requester_id:
            raise NotFound("Document", document_id)

        k = top_k if top_k is not None else self._config.stream_top_k
        chunks = self._retriever.retrieve_in_document(document_id, query, k)
        _record_query(len(chunks), mode="stream", owner_id=requester_id, document_id=document_id)

        fragments = stream(
            model=self._config.model,
            messages=build_messages(query, chunks),
            max_tokens=self._config.max_tokens,
            temperature=self._config.temperature,
        )
        return StreamedAnswer(fragments, _sources(chunks))


def build_messages(question: str, chunks: list[RetrievedChunk]) -> list[dict]:
    """Return the system + user messages grounding *question* in *chunks*."""
    if chunks:
        context = "\n\n".join(
            f"[{i + 1}] {c.filename}\n{c.content}" for i, c in enumerate(chunks)
        )
    else:
        context = _EMPTY_CONTEXT

    return [
        {"role": "system", "content": _SYSTEM_PROMPT},
        {"role": "user", "content": f"Context:\n{context}\n\nQuestion: {question}"},
    ]


def _sources(chunks: list[RetrievedChunk]) -> list[SourceAttribution]:
    return [
        SourceAttribution(
            filename=c.filename,
            similarity=c.similarity,
            document_id=c.document_id,
        )
        for c in chunks
    ]


def _record_query(context_chunks: int, **fields: object) -> None:
    _logger.info("rag_query", context_chunks=context_chunks, **fields)
