from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from ...domain.errors import DomainError, VectorStoreError
from ...domain.types import Result
from ..ports.vector_store_port import VectorStorePort

logger = logging.getLogger(__name__)


@dataclass
class DeleteDocuments:
    vector_store: VectorStorePort

    def execute(self, metadata_filter: dict[str, Any] | None = None) -> Result[None, DomainError]:
        """Delete by filter, or everything when no filter is given. Irreversible."""
        try:
            if metadata_filter:
                self.vector_store.delete_by_metadata(metadata_filter)
                logger.info("Deleted documents matching %s", metadata_filter)
            else:
                self.vector_store.delete_all()
                logger.info("Deleted all documents")
        except DomainError as ex:
            return Result.failure(ex)
        except Exception as ex:  # noqa: BLE001
            return Result.failure(VectorStoreError(f"delete failed: {ex}"))
        return Result.success(None)
