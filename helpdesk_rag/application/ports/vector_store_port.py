from collections.abc import Sequence
from typing import Any, Protocol, runtime_checkable

# Import domain models and re-export for convenience
from ...domain.models import SimilarityResult, StoredDocument

__all__ = ["SimilarityResult", "StoredDocument", "VectorStorePort"]


@runtime_checkable
class VectorStorePort(Protocol):
    def upsert(self, documents: Sequence[StoredDocument]) -> None:
        """Insert or replace by id."""
        ...

    def query(
        self,
        vector: Sequence[float],
        top_k: int,
        metadata_filter: dict[str, Any] | None = None,
    ) -> list[SimilarityResult]:
        """Nearest neighbours, similarity descending, clamped to [0, 1]."""
        ...

    def delete_all(self) -> None: ...

    def delete_by_metadata(self, metadata_filter: dict[str, Any]) -> None: ...
