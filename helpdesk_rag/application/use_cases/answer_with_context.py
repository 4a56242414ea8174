from __future__ import annotations

import logging
from dataclasses import dataclass, field

from ...domain.errors import GenerationBackendError, LLMError, RAGConfigError
from ...domain.models import RAGAnswer, RAGSource, SimilarityResult
from ...domain.rag_config import (
    DEFAULT_FALLBACK_MESSAGE,
    RAGConfig,
    ResponseMode,
    resolve_module_settings,
    validate_retrieval_settings,
)
from ...domain.similarity import mean_similarity
from ..dto.search_dto import SearchRequest
from ..ports.llm_port import LLMPort
from ..ports.telemetry_port import NullTelemetry, TelemetryPort
from .search_documents import SearchDocuments

logger = logging.getLogger(__name__)

SYSTEM_PROMPTS = {
    ResponseMode.CONCISE.value: (
        "You are a helpful assistant. Answer the user's question in 2-4 lines maximum "
        "using the provided context. Be direct and concise."
    ),
    ResponseMode.DETAILED.value: (
        "You are a helpful assistant. Answer the user's question thoroughly using the "
        "provided context. Provide detailed, accurate information."
    ),
}

RAW_SEPARATOR = "\n\n---\n\n"


def build_answer_prompt(context_text: str, query: str, mode: str) -> str:
    return (
        f"Context:\n{context_text}\n\n"
        f"User Question: {query}\n\n"
        f"Provide a {mode} answer based on the context above:"
    )


def format_raw(results: list[SimilarityResult]) -> str:
    return RAW_SEPARATOR.join(f"[Source {i + 1}]\n{r.content}" for i, r in enumerate(results))


@dataclass
class AnswerWithContext:
    """
    RAG module execution: validate config → search → answer.

    - invalid config raises ``RAGConfigError`` before any retrieval
    - no hits yields the fallback answer (``has_context=False``)
    - raw mode returns the sources verbatim, other modes call the LLM once
    """

    search: SearchDocuments
    llm: LLMPort | None = None
    telemetry: TelemetryPort = field(default_factory=NullTelemetry)

    def execute(self, config: RAGConfig, query: str, node_id: str | None = None) -> RAGAnswer:
        errors = validate_retrieval_settings(config)
        if errors:
            raise RAGConfigError(f"RAG node configuration invalid: {', '.join(errors)}", errors)

        settings = resolve_module_settings(config, node_id)
        logger.info(
            "RAG search (threshold=%.2f, count=%d, filter=%s)",
            settings.match_threshold,
            settings.match_count,
            settings.metadata_filter,
        )
        results = self.search.execute(
            SearchRequest(
                query=query,
                match_threshold=settings.match_threshold,
                match_count=settings.match_count,
                metadata_filter=settings.metadata_filter or None,
            )
        )

        mode = config.response_mode or ResponseMode.CONCISE.value
        if not results:
            logger.info("No relevant context found, using fallback message")
            return RAGAnswer(
                answer=config.fallback_message or DEFAULT_FALLBACK_MESSAGE,
                has_context=False,
                confidence=0.0,
                sources=[],
                response_mode=mode,
            )

        confidence = mean_similarity([r.similarity for r in results])
        self.telemetry.observe("rag.answer.confidence", confidence, {"mode": mode})
        sources = [
            RAGSource(
                similarity=round(r.similarity, 2),
                category=r.metadata.get("category"),
                content=r.content if mode == ResponseMode.RAW.value else None,
            )
            for r in results
        ]

        if mode == ResponseMode.RAW.value:
            answer = format_raw(results)
        else:
            answer = self._generate(results, query, mode)

        logger.info(
            "RAG answer ready (confidence=%.2f, sources=%d)", confidence, len(sources)
        )
        return RAGAnswer(
            answer=answer,
            has_context=True,
            confidence=confidence,
            sources=sources,
            response_mode=mode,
        )

    def _generate(self, results: list[SimilarityResult], query: str, mode: str) -> str:
        if self.llm is None:
            raise GenerationBackendError(
                "No generation backend configured (set LLM_API_KEY)"
            )
        context_text = "\n\n".join(r.content for r in results)
        try:
            text = self.llm.complete(
                build_answer_prompt(context_text, query, mode), system=SYSTEM_PROMPTS[mode]
            )
        except LLMError:
            raise
        except Exception as ex:  # noqa: BLE001
            raise GenerationBackendError(f"generation failed: {ex}") from ex
        return text.strip()
