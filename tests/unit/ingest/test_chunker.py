"""Tests for TextChunker windowing and sentence snapping."""

from __future__ import annotations

import pytest

from docinsight.ingest.chunker import CHUNK_OVERLAP, CHUNK_SIZE, TextChunker, estimate_tokens


@pytest.fixture
def chunker():
    return TextChunker()


def test_defaults():
    assert CHUNK_SIZE == 2000
    assert CHUNK_OVERLAP == 200


# --- Degenerate input ---

@pytest.mark.parametrize("text", ["", None])
def test_empty_text_gives_no_chunks(chunker, text):
    assert chunker.chunk(text) == []


def test_whitespace_only_gives_no_chunks(chunker):
    assert chunker.chunk("   \n\t  ") == []


def test_short_text_single_stripped_chunk(chunker):
    assert chunker.chunk("  Hello world. Short document.\n") == ["Hello world. Short document."]


# --- Windowing ---

def test_no_sentence_break_splits_at_window_with_overlap(chunker):
    text = "a" * 2500
    chunks = chunker.chunk(text)
    assert [len(c) for c in chunks] == [2000, 700]


def test_overlap_repeats_tail_of_previous_chunk(chunker):
    text = "".join(chr(ord("a") + i % 26) for i in range(3000))
    first, second = chunker.chunk(text)[:2]
    assert second[:200] == first[-200:]


def test_every_chunk_within_size(chunker):
    text = ("word " * 3000).strip()
    chunks = chunker.chunk(text)
    assert len(chunks) > 1
    assert all(len(c) <= 2000 for c in chunks)


def test_chunks_are_stripped(chunker):
    text = ("Lorem ipsum dolor sit amet   \n" * 300)
    for c in chunker.chunk(text):
        assert c == c.strip()
        assert c


# --- Sentence snapping ---

def test_snaps_to_sentence_past_midpoint(chunker):
    text = "a" * 1500 + ". " + "b" * 1000
    chunks = chunker.chunk(text)
    assert chunks[0] == "a" * 1500 + "."
    assert chunks[1].endswith("b" * 1000)
    # second window starts overlap characters before the first one ended
    assert chunks[1].startswith("a" * 199 + ".")


def test_ignores_sentence_before_midpoint(chunker):
    text = "a" * 500 + ". " + "b" * 2000
    chunks = chunker.chunk(text)
    assert len(chunks[0]) == 2000


def test_sentence_break_at_window_end_keeps_period(chunker):
    text = "a" * 2000 + ". " + "b" * 500
    chunks = chunker.chunk(text)
    assert chunks[0] == "a" * 2000 + "."


def test_last_window_is_not_snapped(chunker):
    text = "a" * 1900 + ". tail"
    assert chunker.chunk(text) == [text]


# --- Custom sizes ---

def test_custom_sizes():
    chunks = TextChunker(chunk_size=10, overlap=2).chunk("abcdefghijklmnopqrstuvwxyz")
    assert chunks == ["abcdefghij", "ijklmnopqr", "qrstuvwxyz"]


def test_zero_overlap_tiles_text():
    chunks = TextChunker(chunk_size=5, overlap=0).chunk("abcdefghij")
    assert chunks == ["abcde", "fghij"]


@pytest.mark.parametrize("size,overlap", [(0, 0), (-5, 0), (10, 10), (10, -1), (10, 20)])
def test_invalid_parameters_raise(size, overlap):
    with pytest.raises(ValueError):
        TextChunker(chunk_size=size, overlap=overlap)


# --- Token estimate ---

def test_estimate_tokens():
    assert estimate_tokens("") == 0
    assert estimate_tokens("abcd" * 10) == 10
