import logging
import random
import string

import pytest

from helpdesk_rag.domain.errors import ValidationError
from helpdesk_rag.domain.services.chunking import (
    ChunkingParams,
    chunk_document,
    chunk_text,
    normalize_whitespace,
)


def test_short_text_is_single_normalized_chunk():
    assert chunk_text("  Hallo \n\n Welt\t! ") == ["Hallo Welt !"]


def test_empty_text_returns_single_empty_chunk():
    assert chunk_text("   ") == [""]


def test_text_of_exactly_chunk_size_is_not_split():
    text = "a" * 800
    assert chunk_text(text) == [text]


def test_window_without_sentence_break_slides_by_size_minus_overlap():
    text = "a" * 2000
    chunks = chunk_text(text, chunk_size=800, chunk_overlap=200)
    assert chunks == ["a" * 800, "a" * 800, "a" * 800, "a" * 200]


def test_cut_after_sentence_break_beyond_half_window():
    text = "x" * 500 + ". " + "y" * 600
    chunks = chunk_text(text, chunk_size=800, chunk_overlap=200)
    assert chunks[0] == "x" * 500 + "."
    # next window starts overlap characters before the cut
    assert chunks[1].startswith("x" * 199 + ".")


def test_sentence_break_in_first_half_is_ignored():
    text = "x" * 100 + "! " + "y" * 1000
    chunks = chunk_text(text, chunk_size=800, chunk_overlap=200)
    assert len(chunks[0]) == 800


def test_chunks_are_substrings_of_normalized_text():
    words = " ".join(f"Satz {i} endet hier." for i in range(300))
    clean = normalize_whitespace(words)
    chunks = chunk_text(words, chunk_size=300, chunk_overlap=50)
    assert clean.startswith(chunks[0])
    assert chunks[0].endswith(".")
    for c in chunks:
        assert c in clean
        assert len(c) <= 300


def test_overlap_not_smaller_than_size_still_terminates():
    chunks = chunk_text("a" * 100, chunk_size=10, chunk_overlap=20)
    assert 0 < len(chunks) <= 100


def test_chunk_count_is_capped(caplog):
    with caplog.at_level(logging.WARNING):
        chunks = chunk_text("a" * 10_000, chunk_size=50, chunk_overlap=0)
    assert len(chunks) == 100
    assert "Too many chunks" in caplog.text


@pytest.mark.parametrize("size,overlap", [(0, 0), (-5, 0), (100, -1)])
def test_invalid_params_raise(size, overlap):
    with pytest.raises(ValidationError):
        chunk_text("irrelevant text", chunk_size=size, chunk_overlap=overlap)


def test_chunk_document_numbers_chunks():
    chunks = chunk_document("b" * 250, ChunkingParams(chunk_size=100, chunk_overlap=0))
    assert [c.ordinal for c in chunks] == [0, 1, 2]
    assert chunks[2].content == "b" * 50


def _random_text(rng: random.Random) -> str:
    sentences = []
    for i in range(rng.randint(15, 40)):
        words = [
            "".join(rng.choices(string.ascii_lowercase, k=rng.randint(2, 8)))
            for _ in range(rng.randint(3, 15))
        ]
        gap = rng.choice([" ", "  ", "\n", "\n\n "])
        sentences.append(f"Satz {i} {' '.join(words)}{rng.choice('.?!')}{gap}")
    return "".join(sentences)


@pytest.mark.parametrize("seed", range(25))
def test_chunks_in_order_cover_whole_normalized_text(seed):
    text = _random_text(random.Random(seed))
    clean = normalize_whitespace(text)
    chunks = chunk_text(text, chunk_size=300, chunk_overlap=60)

    covered = 0
    prev_start = -1
    for c in chunks:
        start = clean.find(c, prev_start + 1)
        assert start != -1
        # kein Loch zwischen zwei Chunks, hoechstens ein abgeschnittenes Leerzeichen
        assert start <= covered or clean[covered:start] == " "
        covered = max(covered, start + len(c))
        prev_start = start

    if len(chunks) < 100:
        assert covered == len(clean)
