"""DOCX extractor — paragraph text via python-docx."""

from __future__ import annotations

from pathlib import Path

import docx

from docinsight.ingest.base import BaseExtractor, ContentType


class DocxExtractor(BaseExtractor):
    """Extract paragraph text from an OOXML word-processing document.

    Each paragraph becomes one line; formatting is dropped.
    """

    content_type = ContentType.DOCX

    def extract(self, path: Path) -> str:
        with open(path, "rb") as fh:
            document = docx.Document(fh)
        return "".join(f"{para.text}\n" for para in document.paragraphs)
