"""Application ports package."""

from .clock_port import ClockPort
from .embedding_port import EmbeddingPort
from .intent_classifier_port import IntentClassifierPort
from .llm_port import ChatMessage, LLMPort, LLMResponse
from .order_repository_port import OrderRepositoryPort
from .telemetry_port import NullTelemetry, TelemetryPort
from .vector_store_port import SimilarityResult, StoredDocument, VectorStorePort

__all__ = [
    "ClockPort",
    "EmbeddingPort",
    "IntentClassifierPort",
    "LLMPort",
    "ChatMessage",
    "LLMResponse",
    "NullTelemetry",
    "OrderRepositoryPort",
    "TelemetryPort",
    "SimilarityResult",
    "StoredDocument",
    "VectorStorePort",
]
