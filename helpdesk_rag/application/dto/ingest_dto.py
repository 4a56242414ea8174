from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from ...domain.services.chunking import ChunkingParams


@dataclass(frozen=True)
class IngestRequest:
    content: str
    metadata: dict[str, Any] = field(default_factory=dict)  # copied onto every chunk
    chunking: ChunkingParams = field(default_factory=ChunkingParams)


@dataclass(frozen=True)
class IngestResult:
    chunks_created: int
    document_ids: tuple[str, ...] = ()
