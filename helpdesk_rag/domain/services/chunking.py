from __future__ import annotations

import logging
import math
import re
from dataclasses import dataclass

from ..errors import ValidationError

logger = logging.getLogger(__name__)

# ---------- Value Objects ----------


@dataclass(frozen=True)
class Chunk:
    content: str
    ordinal: int


@dataclass(frozen=True)
class ChunkingParams:
    chunk_size: int = 800
    chunk_overlap: int = 200
    max_chunks: int = 100
    min_break_ratio: float = 0.5


# ---------- Heuristiken ----------

_WHITESPACE = re.compile(r"\s+")
_SENTENCE_BREAKS = (". ", "? ", "! ")


def normalize_whitespace(text: str) -> str:
    """Collapse whitespace runs to a single space and trim both ends."""
    return _WHITESPACE.sub(" ", text).strip()


def _last_sentence_break(window: str) -> int:
    """Index of the last sentence terminator followed by a space, or -1."""
    return max(window.rfind(marker) for marker in _SENTENCE_BREAKS)


def _iteration_budget(length: int, p: ChunkingParams) -> int:
    stride = p.chunk_size - p.chunk_overlap
    return math.ceil(length / max(stride, 1)) + 10


def _validate(p: ChunkingParams) -> None:
    if p.chunk_size <= 0:
        raise ValidationError("chunk_size must be > 0")
    if p.chunk_overlap < 0:
        raise ValidationError("chunk_overlap must be >= 0")


# ---------- Sliding window ----------


def chunk_text(
    text: str,
    chunk_size: int = 800,
    chunk_overlap: int = 200,
    params: ChunkingParams | None = None,
) -> list[str]:
    """Split text into overlapping, sentence-aware chunks.

    The window is ``chunk_size`` characters wide. When it does not reach the end
    of the text, it is cut back to the last ``". "``, ``"? "`` or ``"! "`` that
    lies beyond half of the window. The next window starts ``overlap`` characters
    before the end of the previous chunk, but always at least one character
    further than the previous start.
    """
    p = params or ChunkingParams(chunk_size=chunk_size, chunk_overlap=chunk_overlap)
    _validate(p)

    clean = normalize_whitespace(text)
    if len(clean) <= p.chunk_size:
        return [clean]

    chunks: list[str] = []
    start = 0
    budget = _iteration_budget(len(clean), p)
    iterations = 0

    while start < len(clean) and iterations < budget:
        iterations += 1

        end = min(start + p.chunk_size, len(clean))
        window = clean[start:end]
        actual_len = len(window)

        if end < len(clean):
            last_break = _last_sentence_break(window)
            if last_break > p.chunk_size * p.min_break_ratio:
                window = window[: last_break + 1]
                actual_len = last_break + 1

        piece = window.strip()
        if piece:
            chunks.append(piece)

        start += max(actual_len - p.chunk_overlap, 1)

    if iterations >= budget and start < len(clean):
        logger.warning("Reached max iterations (%d), text may be truncated", budget)

    logger.info("Created %d chunks from %d characters", len(chunks), len(clean))

    if len(chunks) > p.max_chunks:
        logger.warning("Too many chunks (%d), limiting to %d", len(chunks), p.max_chunks)
        return chunks[: p.max_chunks]
    return chunks


def chunk_document(text: str, params: ChunkingParams | None = None) -> list[Chunk]:
    """Chunk ``text`` and number the pieces in document order."""
    p = params or ChunkingParams()
    return [Chunk(content=c, ordinal=i) for i, c in enumerate(chunk_text(text, params=p))]


# Eigenschaften:
#
# - Kein I/O, keine Globals; nur Logging der Sicherheitsgrenzen.
# - Fortschritt garantiert: Schrittweite >= 1 auch bei overlap >= chunk_size.
# - Sicherheitsventile (Iterationsbudget, max. 100 Chunks) sind nicht fatal.
