"""PDF extractor — page-based extraction via pypdf."""

from __future__ import annotations

from pathlib import Path

import pypdf

from docinsight.ingest.base import BaseExtractor, ContentType


class PdfExtractor(BaseExtractor):
    """Extract text from a PDF page by page.

    Pages that yield no text (scanned images, etc.) are skipped; the rest are
    joined with blank lines.
    """

    content_type = ContentType.PDF

    def extract(self, path: Path) -> str:
        with open(path, "rb") as fh:
            reader = pypdf.PdfReader(fh)
            parts: list[str] = []
            for page in reader.pages:
                page_text = (page.extract_text() or "").strip()
                if page_text:
                    parts.append(page_text)
        return "\n\n".join(parts)
