from __future__ import annotations

import logging
import os
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any, cast

from ...application.ports.vector_store_port import (
    SimilarityResult,
    StoredDocument,
    VectorStorePort,
)
from ...domain.errors import StoreQueryError, VectorStoreError
from ...domain.similarity import clamp_similarity

try:  # pragma: no cover - exercised via tests with monkeypatch
    import chromadb
except Exception:  # noqa: BLE001
    chromadb = None

logger = logging.getLogger(__name__)

_SCALARS = (str, int, float, bool)


def to_where(metadata_filter: dict[str, Any] | None) -> dict[str, Any] | None:
    """Equality filter → Chroma ``where`` (``$and`` for more than one key)."""
    if not metadata_filter:
        return None
    clauses = [{k: v} for k, v in metadata_filter.items()]
    return clauses[0] if len(clauses) == 1 else {"$and": clauses}


def _flat_metadata(metadata: dict[str, Any]) -> dict[str, Any]:
    # Chroma speichert nur skalare Metadaten
    return {
        k: (v if isinstance(v, _SCALARS) else str(v))
        for k, v in metadata.items()
        if v is not None
    }


@dataclass
class ChromaVectorStoreAdapter(VectorStorePort):
    persist_dir: str = "var/chroma"
    collection: str = "documents"
    _client: Any | None = None
    _coll: Any | None = None

    def __post_init__(self) -> None:
        if chromadb is None:
            raise VectorStoreError("chromadb not installed.")
        os.makedirs(self.persist_dir, exist_ok=True)
        try:
            self._client = chromadb.PersistentClient(path=self.persist_dir)
        except Exception as ex:  # noqa: BLE001
            raise VectorStoreError(f"Failed to init Chroma at '{self.persist_dir}': {ex}") from ex
        self._open_collection()

    def _open_collection(self) -> None:
        try:
            self._coll = self._client.get_or_create_collection(
                name=self.collection,
                metadata={"hnsw:space": "cosine"},
            )
        except Exception as ex:  # noqa: BLE001
            raise VectorStoreError(
                f"Failed to ensure collection '{self.collection}': {ex}"
            ) from ex

    def upsert(self, documents: Sequence[StoredDocument]) -> None:
        if not documents:
            return
        try:
            self._coll.upsert(
                ids=[d.id for d in documents],
                embeddings=[list(d.vector) for d in documents],
                metadatas=[_flat_metadata(dict(d.metadata)) for d in documents],
                documents=[d.content for d in documents],
            )
        except Exception as ex:  # noqa: BLE001
            raise VectorStoreError(f"Upsert failed: {ex}") from ex

    def query(
        self,
        vector: Sequence[float],
        top_k: int,
        metadata_filter: dict[str, Any] | None = None,
    ) -> list[SimilarityResult]:
        try:
            result = cast(
                dict[str, list[list[Any]]],
                self._coll.query(
                    query_embeddings=[list(vector)],
                    n_results=top_k,
                    where=to_where(metadata_filter),
                    include=["documents", "metadatas", "distances"],
                ),
            )
        except Exception as ex:  # noqa: BLE001
            raise StoreQueryError(f"Search failed: {ex}") from ex

        ids = (result.get("ids") or [[]])[0]
        documents = (result.get("documents") or [[]])[0]
        metadatas = (result.get("metadatas") or [[]])[0]
        distances = (result.get("distances") or [[]])[0]

        out: list[SimilarityResult] = []
        for idx, doc_id in enumerate(ids):
            distance = float(distances[idx]) if idx < len(distances) else 1.0
            text = documents[idx] if idx < len(documents) and documents[idx] is not None else ""
            metadata = metadatas[idx] if idx < len(metadatas) and metadatas[idx] is not None else {}
            out.append(
                SimilarityResult(
                    id=str(doc_id),
                    content=str(text),
                    metadata=dict(metadata),
                    similarity=clamp_similarity(1.0 - distance),  # Chroma liefert Distanz
                )
            )
        out.sort(key=lambda r: r.similarity, reverse=True)
        return out

    def delete_all(self) -> None:
        try:
            self._client.delete_collection(name=self.collection)
        except Exception as ex:  # noqa: BLE001
            raise VectorStoreError(f"Failed to clear collection '{self.collection}': {ex}") from ex
        self._open_collection()

    def delete_by_metadata(self, metadata_filter: dict[str, Any]) -> None:
        if not metadata_filter:
            raise VectorStoreError("delete_by_metadata requires a non-empty filter")
        try:
            self._coll.delete(where=to_where(metadata_filter))
        except Exception as ex:  # noqa: BLE001
            raise VectorStoreError(f"Delete failed: {ex}") from ex
