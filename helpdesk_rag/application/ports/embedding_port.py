from collections.abc import Sequence
from typing import Protocol, runtime_checkable


@runtime_checkable
class EmbeddingPort(Protocol):
    """Text → fixed-dimension vector.

    Every returned vector has exactly ``dimension`` components.
    Failures surface as ``EmbeddingError``.
    """

    dimension: int

    def embed(self, text: str) -> list[float]: ...

    def embed_batch(self, texts: Sequence[str]) -> list[list[float]]: ...
