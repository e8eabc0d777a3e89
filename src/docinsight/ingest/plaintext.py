"""Plain text extractor."""

from __future__ import annotations

from pathlib import Path

from docinsight.ingest.base import BaseExtractor, ContentType


class PlainTextExtractor(BaseExtractor):
    """Read a text file as UTF-8; undecodable bytes become U+FFFD."""

    content_type = ContentType.PLAIN_TEXT

    def extract(self, path: Path) -> str:
        return path.read_text(encoding="utf-8", errors="replace")
