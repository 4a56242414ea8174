"""Application settings with environment-driven configuration.

Einzige Stelle mit Env; alle anderen Schichten bekommen Settings injiziert.
"""

import os
from dataclasses import dataclass, field


def _flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class AppSettings:
    """Application settings loaded from environment variables.

    This is the ONLY place where environment variables are read.
    """

    # ===== Vector Store Configuration =====
    vector_backend: str = field(
        default_factory=lambda: os.getenv("VECTOR_BACKEND", "qdrant").lower()
    )
    # Supported: "qdrant" | "chroma" | "faiss"

    qdrant_url: str = field(
        default_factory=lambda: os.getenv("QDRANT_URL", "http://localhost:6333")
    )
    qdrant_api_key: str = field(default_factory=lambda: os.getenv("QDRANT_API_KEY", ""))
    qdrant_timeout_s: int = field(default_factory=lambda: int(os.getenv("QDRANT_TIMEOUT_S", "30")))

    chroma_dir: str = field(default_factory=lambda: os.getenv("CHROMA_DIR", "var/chroma"))

    collection: str = field(default_factory=lambda: os.getenv("VECTOR_COLLECTION", "documents"))

    # ===== Embedding Configuration =====
    embedding_model: str = field(
        default_factory=lambda: os.getenv("EMBEDDING_MODEL", "thenlper/gte-small")
    )
    embedding_dimension: int = field(
        default_factory=lambda: int(os.getenv("EMBEDDING_DIMENSION", "384"))
    )
    embedding_device: str = field(default_factory=lambda: os.getenv("EMBEDDING_DEVICE", "cpu"))
    # Supported: "cpu" | "cuda" | "mps"

    # ===== Retrieval / Ingestion =====
    default_match_threshold: float = field(
        default_factory=lambda: float(os.getenv("DEFAULT_MATCH_THRESHOLD", "0.7"))
    )
    default_match_count: int = field(
        default_factory=lambda: int(os.getenv("DEFAULT_MATCH_COUNT", "5"))
    )
    chunk_size: int = field(default_factory=lambda: int(os.getenv("CHUNK_SIZE", "800")))
    chunk_overlap: int = field(default_factory=lambda: int(os.getenv("CHUNK_OVERLAP", "200")))
    upsert_timeout_s: float = field(
        default_factory=lambda: float(os.getenv("UPSERT_TIMEOUT_S", "30"))
    )

    # ===== LLM Configuration =====
    llm_base_url: str = field(
        default_factory=lambda: os.getenv("LLM_BASE_URL", "https://api.groq.com/openai/v1")
    )
    llm_api_key: str = field(default_factory=lambda: os.getenv("LLM_API_KEY", ""))
    llm_model: str = field(
        default_factory=lambda: os.getenv("LLM_MODEL", "llama-3.3-70b-versatile")
    )

    # ===== Orchestrator =====
    intent_classifier: str = field(
        default_factory=lambda: os.getenv("INTENT_CLASSIFIER", "llm").lower()
    )
    # Supported: "llm" | "keyword" (llm falls back to keyword without LLM_API_KEY)

    orders_file: str = field(default_factory=lambda: os.getenv("ORDERS_FILE", ""))
    # Empty = seeded demo orders

    # ===== Telemetry / Logging =====
    telemetry_enabled: bool = field(default_factory=lambda: _flag("TELEMETRY_ENABLED", "false"))
    otlp_endpoint: str = field(default_factory=lambda: os.getenv("OTLP_ENDPOINT", ""))
    log_level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO").upper())
