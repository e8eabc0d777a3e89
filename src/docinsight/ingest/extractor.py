"""Content-type dispatch to the format extractors.

ContentType → extractor mapping:
  application/pdf                                                          → PdfExtractor
  application/vnd.openxmlformats-officedocument.wordprocessingml.document → DocxExtractor
  text/plain                                                               → PlainTextExtractor
"""

from __future__ import annotations

from pathlib import Path

from docinsight.errors import ExtractionFailure
from docinsight.ingest.base import BaseExtractor, ContentType
from docinsight.ingest.docx_extractor import DocxExtractor
from docinsight.ingest.pdf import PdfExtractor
from docinsight.ingest.plaintext import PlainTextExtractor
from docinsight.utils.logging import get_logger

_logger = get_logger(__name__)

EXTRACTORS: dict[ContentType, BaseExtractor] = {
    ContentType.PDF: PdfExtractor(),
    ContentType.DOCX: DocxExtractor(),
    ContentType.PLAIN_TEXT: PlainTextExtractor(),
}


def extract(path: Path | str, content_type: str | ContentType) -> str:
    """Return the full text of the stored file at *path*.

    Raises:
        UnsupportedFormat: If *content_type* is not supported.
        ExtractionFailure: If reading or decoding the file fails.
    """
    kind = content_type if isinstance(content_type, ContentType) else ContentType.parse(content_type)
    path = Path(path)

    try:
        text = EXTRACTORS[kind].extract(path)
    except Exception as exc:
        _logger.error(
            "extraction_failed", path=path.name, content_type=kind.value, error=str(exc)
        )
        raise ExtractionFailure(f"Failed to extract text from '{path.name}': {exc}") from exc

    _logger.info("text_extracted", path=path.name, content_type=kind.value, chars=len(text))
    return text
