from __future__ import annotations

import logging
import secrets
import string
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FuturesTimeout
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from ...domain.errors import (
    DomainError,
    EmbeddingError,
    RetrievalError,
    UpsertTimeoutError,
    ValidationError,
)
from ...domain.models import StoredDocument
from ...domain.services.chunking import chunk_text
from ...domain.types import Result
from ..dto.ingest_dto import IngestRequest, IngestResult
from ..ports.clock_port import ClockPort
from ..ports.embedding_port import EmbeddingPort
from ..ports.telemetry_port import NullTelemetry, TelemetryPort
from ..ports.vector_store_port import VectorStorePort

logger = logging.getLogger(__name__)

_ALPHABET = string.ascii_lowercase + string.digits


def mint_document_id(ordinal: int, now: datetime) -> str:
    """``<epoch_ms>-<ordinal>-<9 random base36 chars>``."""
    suffix = "".join(secrets.choice(_ALPHABET) for _ in range(9))
    return f"{int(now.timestamp() * 1000)}-{ordinal}-{suffix}"


@dataclass
class IngestDocuments:
    """chunk → embed → upsert, reported as ``Result`` (never raises domain errors)."""

    embedding: EmbeddingPort
    vector_store: VectorStorePort
    dimension: int
    upsert_timeout_s: float = 30.0
    clock: ClockPort | None = None
    telemetry: TelemetryPort = field(default_factory=NullTelemetry)

    def execute(self, req: IngestRequest) -> Result[IngestResult, DomainError]:
        try:
            return Result.success(self._run(req))
        except DomainError as ex:
            logger.error("Ingestion failed: %s", ex)
            return Result.failure(ex)
        except Exception as ex:  # noqa: BLE001
            logger.exception("Ingestion failed unexpectedly")
            return Result.failure(RetrievalError(f"ingestion failed: {ex}"))

    def _run(self, req: IngestRequest) -> IngestResult:
        # 1) Validate
        if not req.content or not req.content.strip():
            raise ValidationError("content must not be empty")

        # 2) Chunk (pure domain)
        chunks = chunk_text(req.content, params=req.chunking)

        # 3) Embed in one batch, then re-check the dimension invariant
        vectors = self.embedding.embed_batch(chunks)
        if len(vectors) != len(chunks):
            raise EmbeddingError(f"expected {len(chunks)} vectors, got {len(vectors)}")
        for i, vec in enumerate(vectors):
            if len(vec) != self.dimension:
                raise EmbeddingError(
                    f"vector {i} has dimension {len(vec)}, expected {self.dimension}"
                )

        # 4) Build documents (caller metadata identical on every chunk)
        now = self.clock.now() if self.clock else datetime.now(timezone.utc)
        documents = [
            StoredDocument(
                id=mint_document_id(i, now),
                vector=tuple(vec),
                content=chunk,
                metadata=self._chunk_metadata(req.metadata, chunk, i),
            )
            for i, (chunk, vec) in enumerate(zip(chunks, vectors, strict=True))
        ]

        # 5) Persist with a bound
        self._upsert_bounded(documents)
        logger.info("Ingested %d chunks", len(documents))
        self.telemetry.observe("ingest.chunks", float(len(documents)))
        return IngestResult(
            chunks_created=len(documents), document_ids=tuple(d.id for d in documents)
        )

    @staticmethod
    def _chunk_metadata(metadata: dict[str, Any], chunk: str, index: int) -> dict[str, Any]:
        return {**metadata, "content": chunk, "chunk_index": index}

    def _upsert_bounded(self, documents: list[StoredDocument]) -> None:
        # Abgelaufene Writes laufen im Hintergrund weiter (kein Rollback).
        pool = ThreadPoolExecutor(max_workers=1, thread_name_prefix="upsert")
        try:
            future = pool.submit(self.vector_store.upsert, documents)
            try:
                future.result(timeout=self.upsert_timeout_s)
            except FuturesTimeout as ex:
                raise UpsertTimeoutError(self.upsert_timeout_s, len(documents)) from ex
        finally:
            pool.shutdown(wait=False)
