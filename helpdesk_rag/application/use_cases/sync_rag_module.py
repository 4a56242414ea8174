from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from ...domain.errors import DomainError, RAGConfigError, ValidationError
from ...domain.rag_config import DocumentMode, RAGConfig, node_category, validate_rag_config
from ...domain.services.chunking import ChunkingParams
from ...domain.types import Result
from ..dto.ingest_dto import IngestRequest
from .delete_documents import DeleteDocuments
from .ingest_documents import IngestDocuments

logger = logging.getLogger(__name__)


@dataclass
class SyncRAGModule:
    """Re-index the documents owned by one RAG module instance.

    Runs when a module's config is saved: the node's previous chunks are
    removed, then pasted text or each uploaded file is ingested under the
    node's category. ``existing`` mode searches the shared corpus and ingests
    nothing.
    """

    ingest: IngestDocuments
    delete: DeleteDocuments
    chunking: ChunkingParams = field(default_factory=ChunkingParams)

    def execute(self, node_id: str, config: RAGConfig) -> Result[int, DomainError]:
        errors = validate_rag_config(config)
        if errors:
            return Result.failure(
                RAGConfigError(f"RAG node configuration invalid: {', '.join(errors)}", errors)
            )
        if config.document_mode == DocumentMode.EXISTING.value:
            return Result.success(0)

        category = node_category(node_id)
        base: dict[str, Any] = {"category": category, "source": "rag-node", "node_id": node_id}
        payloads: list[dict[str, Any]] = []
        texts: list[str] = []
        if config.document_mode == DocumentMode.PASTE.value:
            texts.append(config.document_content or "")
            payloads.append(base)
        else:
            for f in config.uploaded_files:
                if not f.content.strip():
                    logger.warning("Skipping empty upload %s for node %s", f.name, node_id)
                    continue
                texts.append(f.content)
                payloads.append({**base, "file_name": f.name, "file_type": f.type})
        if not texts:
            return Result.failure(ValidationError(f"No content to index for node {node_id}"))

        # alte Chunks erst entfernen, wenn neuer Inhalt feststeht
        deleted = self.delete.execute({"category": category})
        if not deleted.ok:
            return Result.failure(deleted.error)

        total = 0
        for text, metadata in zip(texts, payloads, strict=True):
            res = self.ingest.execute(
                IngestRequest(content=text, metadata=metadata, chunking=self.chunking)
            )
            if not res.ok:
                return Result.failure(res.error)
            total += res.value.chunks_created

        logger.info("Synced RAG module %s: %d chunks", node_id, total)
        return Result.success(total)
