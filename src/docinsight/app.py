"""Component wiring: one set of core services per database connection."""

from __future__ import annotations

import sqlite3
from dataclasses import dataclass
from datetime import timedelta

from docinsight.config import DocInsightConfig
from docinsight.conversations.ledger import ConversationLedger
from docinsight.db.repository import Repository
from docinsight.ingest.chunker import TextChunker
from docinsight.ingest.embedding import EmbeddingConfig, EmbeddingGateway
from docinsight.ingest.pipeline import DocumentIngestor
from docinsight.rag.retriever import Retriever
from docinsight.rag.synthesizer import AnswerSynthesizer, SynthesizerConfig
from docinsight.storage import FileStorage


@dataclass
class Services:
    """The core operations exposed to an outer layer (CLI, HTTP handler)."""

    repo: Repository
    storage: FileStorage
    ingestor: DocumentIngestor
    retriever: Retriever
    synthesizer: AnswerSynthesizer
    ledger: ConversationLedger
    config: DocInsightConfig


def build_services(conn: sqlite3.Connection, cfg: DocInsightConfig) -> Services:
    """Wire every core component against *conn* using *cfg*.

    Build one Services per worker; nothing here is shared between connections.
    """
    repo = Repository(conn)
    storage = FileStorage(cfg.storage.upload_dir)
    gateway = EmbeddingGateway(
        EmbeddingConfig(model=cfg.embedding.model, num_retries=cfg.embedding.num_retries)
    )
    retriever = Retriever(repo, gateway)
    return Services(
        repo=repo,
        storage=storage,
        ingestor=DocumentIngestor(
            repo,
            storage,
            gateway,
            TextChunker(cfg.chunking.chunk_size, cfg.chunking.overlap),
        ),
        retriever=retriever,
        synthesizer=AnswerSynthesizer(
            retriever,
            repo,
            SynthesizerConfig(
                model=cfg.generation.model,
                max_tokens=cfg.generation.max_tokens,
                temperature=cfg.generation.temperature,
                stream_top_k=cfg.retrieval.stream_top_k,
            ),
        ),
        ledger=ConversationLedger(
            repo, retention=timedelta(hours=cfg.conversations.retention_hours)
        ),
        config=cfg,
    )
