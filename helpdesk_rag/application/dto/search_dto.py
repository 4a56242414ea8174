# helpdesk_rag/application/dto/search_dto.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class SearchRequest:
    """
    DTO for similarity search.

    - query: user text (non-empty)
    - match_threshold: similarity floor in [0, 1]; results below are dropped
    - match_count: how many nearest neighbours to ask the store for (>= 1)
    - metadata_filter: equality filter, AND across keys; None searches everything
    """

    query: str
    match_threshold: float = 0.7
    match_count: int = 5
    metadata_filter: dict[str, Any] | None = None
