"""docinsight ingest pipeline — extractors, chunker, embedding gateway, orchestrator."""

from docinsight.ingest.base import BaseExtractor, ContentType
from docinsight.ingest.chunker import TextChunker, estimate_tokens
from docinsight.ingest.embedding import EmbeddingConfig, EmbeddingGateway
from docinsight.ingest.extractor import EXTRACTORS, extract
from docinsight.ingest.pipeline import DocumentIngestor

__all__ = [
    "BaseExtractor",
    "ContentType",
    "DocumentIngestor",
    "EXTRACTORS",
    "EmbeddingConfig",
    "EmbeddingGateway",
    "TextChunker",
    "estimate_tokens",
    "extract",
]
