from __future__ import annotations

import logging
import uuid
from collections.abc import Sequence
from dataclasses import dataclass, field
from importlib import import_module
from typing import Any

from ...application.ports.vector_store_port import (
    SimilarityResult,
    StoredDocument,
    VectorStorePort,
)
from ...domain.errors import StoreQueryError, VectorStoreError
from ...domain.similarity import clamp_similarity

logger = logging.getLogger(__name__)

# Qdrant akzeptiert nur UUIDs/Integers als Point-IDs.
_ID_NAMESPACE = uuid.UUID("6f1c9a52-3b0e-4d8e-9a55-2f1f0c8e7b41")


def point_id(doc_id: str) -> str:
    return str(uuid.uuid5(_ID_NAMESPACE, doc_id))


@dataclass
class QdrantVectorStoreAdapter(VectorStorePort):
    url: str = "http://localhost:6333"
    api_key: str | None = None
    collection: str = "documents"
    dimension: int = 384
    timeout_s: float = 10.0
    _cli: Any | None = field(default=None, init=False, repr=False)
    _models: Any | None = field(default=None, init=False, repr=False)
    _ready: bool = field(default=False, init=False, repr=False)

    def __post_init__(self) -> None:
        try:
            client_mod = import_module("qdrant_client")
            self._models = import_module("qdrant_client.models")
        except Exception as ex:  # pragma: no cover
            raise VectorStoreError("qdrant-client not available; install runtime deps") from ex
        try:
            self._cli = client_mod.QdrantClient(
                url=self.url, api_key=self.api_key, timeout=int(self.timeout_s)
            )
        except Exception as ex:  # noqa: BLE001
            raise VectorStoreError(f"Failed to connect to Qdrant at '{self.url}': {ex}") from ex

    def _ensure_collection(self) -> None:
        if self._ready:
            return
        m = self._models
        try:
            if not self._cli.collection_exists(self.collection):
                logger.info(
                    "Creating Qdrant collection %s (dim=%d)", self.collection, self.dimension
                )
                self._cli.create_collection(
                    collection_name=self.collection,
                    vectors_config=m.VectorParams(size=self.dimension, distance=m.Distance.COSINE),
                )
        except Exception as ex:  # noqa: BLE001
            raise VectorStoreError(
                f"Failed to ensure collection '{self.collection}': {ex}"
            ) from ex
        self._ready = True

    def _filter(self, metadata_filter: dict[str, Any] | None) -> Any | None:
        if not metadata_filter:
            return None
        m = self._models
        return m.Filter(
            must=[
                m.FieldCondition(key=k, match=m.MatchValue(value=v))
                for k, v in metadata_filter.items()
            ]
        )

    def upsert(self, documents: Sequence[StoredDocument]) -> None:
        if not documents:
            return
        self._ensure_collection()
        try:
            points = [
                self._models.PointStruct(
                    id=point_id(d.id),
                    vector=list(d.vector),
                    payload={**d.metadata, "content": d.content, "doc_id": d.id},
                )
                for d in documents
            ]
            self._cli.upsert(collection_name=self.collection, points=points, wait=True)
        except Exception as ex:  # noqa: BLE001
            raise VectorStoreError(f"Upsert failed: {ex}") from ex

    def query(
        self,
        vector: Sequence[float],
        top_k: int,
        metadata_filter: dict[str, Any] | None = None,
    ) -> list[SimilarityResult]:
        self._ensure_collection()
        try:
            rs: Any = self._cli.query_points(
                collection_name=self.collection,
                query=list(vector),
                limit=top_k,
                query_filter=self._filter(metadata_filter),
                with_payload=True,
            )
        except Exception as ex:  # noqa: BLE001
            raise StoreQueryError(f"Search failed: {ex}") from ex
        out: list[SimilarityResult] = []
        for p in rs.points:
            payload = dict(p.payload or {})
            out.append(
                SimilarityResult(
                    id=str(payload.get("doc_id", p.id)),
                    content=str(payload.get("content", "")),
                    metadata=payload,
                    similarity=clamp_similarity(p.score),
                )
            )
        out.sort(key=lambda r: r.similarity, reverse=True)
        return out

    def delete_all(self) -> None:
        try:
            self._cli.delete_collection(collection_name=self.collection)
        except Exception as ex:  # noqa: BLE001
            raise VectorStoreError(
                f"Failed to clear collection '{self.collection}': {ex}"
            ) from ex
        self._ready = False
        self._ensure_collection()

    def delete_by_metadata(self, metadata_filter: dict[str, Any]) -> None:
        if not metadata_filter:
            raise VectorStoreError("delete_by_metadata requires a non-empty filter")
        self._ensure_collection()
        try:
            self._cli.delete(
                collection_name=self.collection,
                points_selector=self._models.FilterSelector(filter=self._filter(metadata_filter)),
                wait=True,
            )
        except Exception as ex:  # noqa: BLE001
            raise VectorStoreError(f"Delete failed: {ex}") from ex
