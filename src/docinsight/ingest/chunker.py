"""Overlapping text chunker with sentence-boundary snapping."""

from __future__ import annotations

CHUNK_SIZE = 2000
CHUNK_OVERLAP = 200

_SENTENCE_BREAK = ". "


class TextChunker:
    """Split extracted text into overlapping windows of characters.

    Each window is ``chunk_size`` characters. When a window stops short of
    the end of the text, it is pulled back to end on the last ". " whose
    period sits past the window midpoint, so chunks end on a sentence
    without becoming undersized. The next window starts ``overlap``
    characters before the previous one ended.

    Token counting uses a 4-chars-per-token approximation and is only used
    for logging.
    """

    def __init__(self, chunk_size: int = CHUNK_SIZE, overlap: int = CHUNK_OVERLAP) -> None:
        if chunk_size < 1:
            raise ValueError("chunk_size must be >= 1")
        if not 0 <= overlap < chunk_size:
            raise ValueError("overlap must be in [0, chunk_size)")
        self.chunk_size = chunk_size
        self.overlap = overlap

    def chunk(self, text: str | None) -> list[str]:
        """Return the stripped, non-empty chunks of *text* in order."""
        if not text:
            return []

        chunks: list[str] = []
        length = len(text)
        start = 0

        while start < length:
            end = min(start + self.chunk_size, length)

            if end < length:
                # a ". " may begin at end itself; the slice then keeps the period
                period = text.rfind(_SENTENCE_BREAK, 0, end + len(_SENTENCE_BREAK))
                if period > start + self.chunk_size // 2:
                    end = period + 1

            segment = text[start:end].strip()
            if segment:
                chunks.append(segment)

            if end >= length:
                break

            next_start = end - self.overlap
            start = next_start if next_start > start else end

        return chunks


def estimate_tokens(text: str) -> int:
    """Approximate token count: 4 characters ≈ 1 token."""
    return len(text) // 4
