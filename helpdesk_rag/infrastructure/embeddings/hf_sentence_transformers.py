from __future__ import annotations

import logging
import threading
from collections.abc import Sequence
from dataclasses import dataclass
from importlib import import_module
from typing import Any

from ...application.ports.embedding_port import EmbeddingPort
from ...domain.errors import EmbeddingError
from ...domain.similarity import fit_dimension

logger = logging.getLogger(__name__)

# Prozessweiter Cache: ein Modell pro (model_name, device), nie freigegeben.
_MODELS: dict[tuple[str, str], Any] = {}
_LOCK = threading.Lock()


def get_shared_model(model_name: str, device: str, local_files_only: bool = False) -> Any:
    """Load the SentenceTransformer once per process (single-flight under a lock)."""
    key = (model_name, device)
    model = _MODELS.get(key)
    if model is not None:
        return model
    with _LOCK:
        model = _MODELS.get(key)
        if model is not None:
            return model
        try:
            st_mod = import_module("sentence_transformers")
        except Exception as ex:  # noqa: BLE001
            raise EmbeddingError("sentence-transformers not installed.") from ex
        logger.info("Loading embedding model %s on %s", model_name, device)
        try:
            model = st_mod.SentenceTransformer(
                model_name, device=device, local_files_only=local_files_only
            )
        except Exception as ex:  # noqa: BLE001
            raise EmbeddingError(f"Failed to load embedding model '{model_name}': {ex}") from ex
        _MODELS[key] = model
        return model


def reset_model_cache() -> None:
    with _LOCK:
        _MODELS.clear()


@dataclass
class HFEmbeddingAdapter(EmbeddingPort):
    """Sentence-Transformers adapter (default ``thenlper/gte-small``, 384 dims)."""

    model_name: str = "thenlper/gte-small"
    dimension: int = 384
    device: str = "cpu"  # switch to "cuda" when available
    local_files_only: bool = False  # support offline deployments
    normalize: bool = True

    def _fit(self, vector: Sequence[float]) -> list[float]:
        if len(vector) != self.dimension:
            logger.warning(
                "Embedding has %d dims, normalizing to %d", len(vector), self.dimension
            )
        return fit_dimension(vector, self.dimension)

    def embed(self, text: str) -> list[float]:
        model = get_shared_model(self.model_name, self.device, self.local_files_only)
        try:
            raw = model.encode(
                text,
                normalize_embeddings=self.normalize,
                convert_to_numpy=True,
                show_progress_bar=False,
            )
            values = [float(x) for x in raw]
        except Exception as ex:  # noqa: BLE001
            raise EmbeddingError(f"Embedding text failed: {ex}") from ex
        return self._fit(values)

    def embed_batch(self, texts: Sequence[str]) -> list[list[float]]:
        # sequenziell, ein encode() pro Chunk
        return [self.embed(t) for t in texts]
