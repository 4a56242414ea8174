# helpdesk_rag/domain/models.py
# Domain models must be pure (no I/O, no external libs)
from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class StoredDocument:
    """
    One embedded chunk as persisted in the vector store.

    - id:        globally unique id minted at ingestion (timestamp-ordinal-random)
    - vector:    embedding of ``content``; length equals the configured dimension
    - content:   the chunk text
    - metadata:  caller metadata, identical for every chunk of one ingestion call

    Never updated in place: re-ingestion mints new ids.
    """

    id: str
    vector: tuple[float, ...]
    content: str
    metadata: Mapping[str, Any]


@dataclass(frozen=True)
class SimilarityResult:
    """A single query hit; ``similarity`` is clamped to [0, 1] by the adapters."""

    id: str
    content: str
    metadata: Mapping[str, Any]
    similarity: float


@dataclass(frozen=True)
class RAGSource:
    """Source reference attached to a RAG answer."""

    similarity: float
    category: str | None = None
    content: str | None = None  # only populated in raw response mode


@dataclass(frozen=True)
class RAGAnswer:
    """Answer produced from retrieved context (or the fallback message)."""

    answer: str
    has_context: bool
    confidence: float
    sources: list[RAGSource] = field(default_factory=list)
    response_mode: str = "concise"
    method: str = "RAG_TO_FRONTEND"


@dataclass(frozen=True)
class RAGContextSummary:
    """What the caller needs to render a "grounded in knowledge base" badge."""

    used: bool = False
    has_context: bool = False
    confidence: float = 0.0
    sources: list[RAGSource] = field(default_factory=list)

    @classmethod
    def from_answer(cls, answer: RAGAnswer) -> RAGContextSummary:
        return cls(
            used=True,
            has_context=answer.has_context,
            confidence=answer.confidence,
            sources=[
                RAGSource(category=s.category, similarity=s.similarity) for s in answer.sources
            ],
        )
