from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass

from ...domain.errors import ValidationError
from ...domain.models import SimilarityResult
from ..dto.search_dto import SearchRequest
from ..ports.embedding_port import EmbeddingPort
from ..ports.vector_store_port import VectorStorePort

logger = logging.getLogger(__name__)


@dataclass
class SearchDocuments:
    """
    Embed the query, ask the store, apply the similarity floor.

    Errors propagate (``EmbeddingError``, ``StoreQueryError``): an empty list
    means "nothing relevant", never "retrieval broken".
    """

    embedding: EmbeddingPort
    vector_store: VectorStorePort

    def execute(self, req: SearchRequest) -> list[SimilarityResult]:
        if not req.query or not req.query.strip():
            raise ValidationError("query must not be empty")
        if not 0.0 <= req.match_threshold <= 1.0:
            raise ValidationError("match_threshold must be between 0 and 1")
        if req.match_count < 1:
            raise ValidationError("match_count must be >= 1")

        vector = self.embedding.embed(req.query)
        hits = self.vector_store.query(
            vector, top_k=req.match_count, metadata_filter=req.metadata_filter or None
        )
        results = [h for h in hits if h.similarity >= req.match_threshold]
        logger.info(
            "Search returned %d/%d results above %.2f", len(results), len(hits), req.match_threshold
        )
        return results


def build_context_block(results: Sequence[SimilarityResult]) -> str:
    """Render hits as ``[Source i]`` blocks for prompt injection."""
    return "\n\n".join(f"[Source {i + 1}]\n{r.content}" for i, r in enumerate(results))


def build_system_prompt_with_context(
    base_prompt: str, results: Sequence[SimilarityResult]
) -> str:
    if not results:
        return base_prompt
    return (
        f"{base_prompt}\n\n"
        "Use the following knowledge base context when it is relevant to the question:\n\n"
        f"{build_context_block(results)}"
    )
