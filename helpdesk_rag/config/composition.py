"""Composition root: settings → adapters → use cases."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from ..application.ports.clock_port import ClockPort
from ..application.ports.embedding_port import EmbeddingPort
from ..application.ports.intent_classifier_port import IntentClassifierPort
from ..application.ports.llm_port import LLMPort
from ..application.ports.order_repository_port import OrderRepositoryPort
from ..application.ports.telemetry_port import NullTelemetry, TelemetryPort
from ..application.ports.vector_store_port import VectorStorePort
from ..application.use_cases.answer_with_context import AnswerWithContext
from ..application.use_cases.delete_documents import DeleteDocuments
from ..application.use_cases.dispatch_module import ModuleDispatcher
from ..application.use_cases.ingest_documents import IngestDocuments
from ..application.use_cases.orchestrate_message import OrchestrateMessage
from ..application.use_cases.search_documents import SearchDocuments
from ..application.use_cases.sync_rag_module import SyncRAGModule
from ..domain.services.chunking import ChunkingParams
from ..infrastructure.embeddings.hf_sentence_transformers import HFEmbeddingAdapter
from ..infrastructure.intent.keyword_intent_classifier import KeywordIntentClassifier
from ..infrastructure.intent.llm_intent_classifier import LLMIntentClassifier
from ..infrastructure.llm.openai_compatible_adapter import OpenAICompatibleAdapter
from ..infrastructure.orders.in_memory_order_repository import InMemoryOrderRepository
from ..infrastructure.telemetry.otel_adapter import OpenTelemetryAdapter, OtelConfig
from ..infrastructure.time.system_clock import SystemClock
from ..infrastructure.vectorstore.chroma_vector_store import ChromaVectorStoreAdapter
from ..infrastructure.vectorstore.faiss_vector_store import FaissVectorStoreAdapter
from ..infrastructure.vectorstore.qdrant_vector_store import QdrantVectorStoreAdapter
from .settings import AppSettings

logger = logging.getLogger(__name__)

VECTOR_BACKENDS = ("qdrant", "chroma", "faiss")


def build_embedding(settings: AppSettings) -> EmbeddingPort:
    return HFEmbeddingAdapter(
        model_name=settings.embedding_model,
        dimension=settings.embedding_dimension,
        device=settings.embedding_device,
    )


def build_vector_store(settings: AppSettings) -> VectorStorePort:
    backend = settings.vector_backend

    if backend == "chroma":
        return ChromaVectorStoreAdapter(
            persist_dir=settings.chroma_dir,
            collection=settings.collection,
        )

    if backend == "qdrant":
        return QdrantVectorStoreAdapter(
            url=settings.qdrant_url,
            api_key=settings.qdrant_api_key or None,
            collection=settings.collection,
            dimension=settings.embedding_dimension,
            timeout_s=settings.qdrant_timeout_s,
        )

    if backend == "faiss":
        return FaissVectorStoreAdapter(dimension=settings.embedding_dimension)

    raise ValueError(
        f"Unknown VECTOR_BACKEND '{backend}'. Supported: {', '.join(VECTOR_BACKENDS)}"
    )


def build_llm(settings: AppSettings) -> LLMPort | None:
    """``None`` without a credential; generation then fails per call, retrieval still works."""
    if not settings.llm_api_key:
        logger.warning("LLM_API_KEY not set, text generation disabled")
        return None
    return OpenAICompatibleAdapter(
        base_url=settings.llm_base_url,
        api_key=settings.llm_api_key,
        model=settings.llm_model,
    )


def build_clock() -> ClockPort:
    return SystemClock()


def build_telemetry(settings: AppSettings) -> TelemetryPort:
    if not settings.telemetry_enabled:
        return NullTelemetry()
    return OpenTelemetryAdapter(
        OtelConfig(otlp_endpoint=settings.otlp_endpoint or None, enable_console=False)
    )


def build_order_repository(settings: AppSettings, clock: ClockPort) -> OrderRepositoryPort:
    if settings.orders_file:
        return InMemoryOrderRepository.from_json_file(settings.orders_file)
    return InMemoryOrderRepository.seeded(clock.now())


def build_intent_classifier(settings: AppSettings, llm: LLMPort | None) -> IntentClassifierPort:
    if settings.intent_classifier == "llm" and llm is not None:
        return LLMIntentClassifier(llm=llm)
    if settings.intent_classifier == "llm":
        logger.warning("No LLM configured, using keyword intent classifier")
    return KeywordIntentClassifier()


def chunking_params(settings: AppSettings) -> ChunkingParams:
    return ChunkingParams(chunk_size=settings.chunk_size, chunk_overlap=settings.chunk_overlap)


@dataclass
class Services:
    """Wired use cases sharing one vector store, embedder and LLM."""

    settings: AppSettings
    ingest: IngestDocuments
    search: SearchDocuments
    delete: DeleteDocuments
    answer: AnswerWithContext
    sync_rag_module: SyncRAGModule
    orchestrate: OrchestrateMessage


def build_services(
    settings: AppSettings | None = None,
    *,
    embedding: EmbeddingPort | None = None,
    vector_store: VectorStorePort | None = None,
    llm: LLMPort | None = None,
    classifier: IntentClassifierPort | None = None,
    orders: OrderRepositoryPort | None = None,
    clock: ClockPort | None = None,
    telemetry: TelemetryPort | None = None,
) -> Services:
    """Build all use cases; keyword arguments override the settings-driven adapters."""
    s = settings or AppSettings()
    clock = clock or build_clock()
    telemetry = telemetry or build_telemetry(s)
    embedding = embedding or build_embedding(s)
    vector_store = vector_store or build_vector_store(s)
    llm = llm if llm is not None else build_llm(s)

    ingest = IngestDocuments(
        embedding=embedding,
        vector_store=vector_store,
        dimension=s.embedding_dimension,
        upsert_timeout_s=s.upsert_timeout_s,
        clock=clock,
        telemetry=telemetry,
    )
    search = SearchDocuments(embedding=embedding, vector_store=vector_store)
    delete = DeleteDocuments(vector_store=vector_store)
    answer = AnswerWithContext(search=search, llm=llm, telemetry=telemetry)
    dispatcher = ModuleDispatcher(
        orders=orders or build_order_repository(s, clock),
        clock=clock,
    )
    orchestrate = OrchestrateMessage(
        classifier=classifier or build_intent_classifier(s, llm),
        dispatcher=dispatcher,
        answerer=answer,
        telemetry=telemetry,
    )
    return Services(
        settings=s,
        ingest=ingest,
        search=search,
        delete=delete,
        answer=answer,
        sync_rag_module=SyncRAGModule(ingest=ingest, delete=delete, chunking=chunking_params(s)),
        orchestrate=orchestrate,
    )
