"""Domain errors (typed) for the retrieval and orchestration core.

Adapters map third-party exceptions onto this family so that the
application layer never sees infrastructure types.
"""

from collections.abc import Sequence


class DomainError(Exception):
    """Base class for domain-specific errors."""


class ValidationError(DomainError):
    """Invalid input/domain state."""


class RAGConfigError(ValidationError):
    """RAG module configuration is incomplete or out of range."""

    def __init__(self, message: str, errors: Sequence[str] = ()) -> None:
        super().__init__(message)
        self.message = message
        self.errors = tuple(errors)


class RetrievalError(DomainError):
    """Generic retrieval failure (after infra errors were mapped)."""


class EmbeddingError(DomainError):
    """Embedding backend failed or is misconfigured."""


class VectorStoreError(DomainError):
    """Vector store backend failed or is misconfigured."""


class UpsertTimeoutError(VectorStoreError):
    """Upsert did not complete within the configured bound."""

    def __init__(self, timeout_s: float, document_count: int = 0) -> None:
        super().__init__(f"Upsert timeout after {timeout_s:g}s ({document_count} vectors)")
        self.timeout_s = timeout_s
        self.document_count = document_count


class StoreQueryError(VectorStoreError):
    """Similarity query against the vector store failed."""


class LLMError(DomainError):
    """LLM backend failed or is misconfigured."""


class GenerationBackendError(LLMError):
    """Text-generation service is unreachable or has no credential."""
