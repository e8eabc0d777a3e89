"""Content types and the base extractor interface."""

from __future__ import annotations

from abc import ABC, abstractmethod
from enum import Enum
from pathlib import Path

from docinsight.errors import UnsupportedFormat


class ContentType(str, Enum):
    """The closed set of upload formats the extractor understands."""

    PDF = "application/pdf"
    DOCX = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
    PLAIN_TEXT = "text/plain"

    @classmethod
    def parse(cls, value: str | None) -> ContentType:
        """Return the member for a declared MIME type.

        Parameters such as ``; charset=utf-8`` are ignored.

        Raises:
            UnsupportedFormat: If *value* is not in the supported set.
        """
        if not value:
            raise UnsupportedFormat(value)
        mime = value.split(";", 1)[0].strip().lower()
        try:
            return cls(mime)
        except ValueError:
            raise UnsupportedFormat(value) from None


class BaseExtractor(ABC):
    """Abstract base for all extractors.

    Subclasses read one stored file and return its full text as one string.
    Any file handle they open must be released before returning, including
    when decoding fails.
    """

    content_type: ContentType

    @abstractmethod
    def extract(self, path: Path) -> str:
        """Return the plain text of the file at *path*.

        Raises:
            OSError: If the file cannot be read.
            Exception: Any decoder error; the dispatcher wraps it.
        """
