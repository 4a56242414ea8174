from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from importlib import import_module
from typing import Any, cast

from ...application.ports.vector_store_port import (
    SimilarityResult,
    StoredDocument,
    VectorStorePort,
)
from ...domain.errors import StoreQueryError, VectorStoreError
from ...domain.similarity import clamp_similarity

logger = logging.getLogger(__name__)


def _matches(metadata: dict[str, Any], metadata_filter: dict[str, Any] | None) -> bool:
    if not metadata_filter:
        return True
    return all(metadata.get(k) == v for k, v in metadata_filter.items())


@dataclass
class FaissVectorStoreAdapter(VectorStorePort):
    """In-process index (``IndexFlatIP`` over L2-normalized vectors = cosine).

    Documents are kept alongside the index so that upserts by id and deletes
    can rebuild it; filters are applied after the similarity search.
    """

    dimension: int = 384
    index: Any | None = field(default=None, init=False)
    docs: list[StoredDocument] = field(default_factory=list, init=False)

    def _require_modules(self) -> tuple[Any, Any]:  # pragma: no cover
        try:
            faiss = import_module("faiss")
            np = import_module("numpy")
        except Exception as ex:  # pragma: no cover
            raise VectorStoreError(
                "faiss-cpu and numpy are required for FaissVectorStoreAdapter"
            ) from ex
        return cast(Any, np), cast(Any, faiss)

    def _normalized(self, np: Any, vectors: Sequence[Sequence[float]]) -> Any:
        arr = np.array(vectors, dtype=np.float32).reshape(-1, self.dimension)
        norms = np.linalg.norm(arr, axis=1, keepdims=True)
        norms[norms == 0] = 1.0
        return arr / norms

    def _build_index(self, docs: Sequence[StoredDocument]) -> Any:
        np, faiss = self._require_modules()
        index = faiss.IndexFlatIP(self.dimension)
        if docs:
            index.add(self._normalized(np, [d.vector for d in docs]))
        return index

    def _rebuild(self) -> None:
        self.index = self._build_index(self.docs)

    def upsert(self, documents: Sequence[StoredDocument]) -> None:
        try:
            incoming = {d.id: d for d in documents}
            kept = [d for d in self.docs if d.id not in incoming]
            docs = kept + list(incoming.values())
            index = self._build_index(docs)
        except VectorStoreError:
            raise  # Re-raise domain errors
        except Exception as ex:  # noqa: BLE001
            raise VectorStoreError(f"Upsert failed: {ex}") from ex
        self.docs, self.index = docs, index

    def query(
        self,
        vector: Sequence[float],
        top_k: int,
        metadata_filter: dict[str, Any] | None = None,
    ) -> list[SimilarityResult]:
        if not self.docs:
            return []
        try:
            if self.index is None:
                self._rebuild()
            np, _faiss = self._require_modules()
            # mit Filter: alles holen, dann filtern
            k = len(self.docs) if metadata_filter else min(top_k, len(self.docs))
            scores, idxs = self.index.search(self._normalized(np, [vector]), k)
        except VectorStoreError:
            raise
        except Exception as ex:  # noqa: BLE001
            raise StoreQueryError(f"Search failed: {ex}") from ex

        out: list[SimilarityResult] = []
        for score, idx in zip(scores[0], idxs[0], strict=False):
            if int(idx) == -1:
                continue
            doc = self.docs[int(idx)]
            meta = dict(doc.metadata)
            if not _matches(meta, metadata_filter):
                continue
            out.append(
                SimilarityResult(
                    id=doc.id,
                    content=doc.content,
                    metadata=meta,
                    similarity=clamp_similarity(float(score)),
                )
            )
            if len(out) >= top_k:
                break
        return out

    def delete_all(self) -> None:
        self.docs = []
        self.index = None

    def delete_by_metadata(self, metadata_filter: dict[str, Any]) -> None:
        if not metadata_filter:
            raise VectorStoreError("delete_by_metadata requires a non-empty filter")
        kept = [d for d in self.docs if not _matches(dict(d.metadata), metadata_filter)]
        index = self._build_index(kept)
        logger.info("Removed %d documents from FAISS index", len(self.docs) - len(kept))
        self.docs, self.index = kept, index
