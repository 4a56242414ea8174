"""Pure similarity helpers shared by the retrieval pipeline."""

from collections.abc import Sequence

from .types import Score


def clamp_similarity(score: float) -> Score:
    """Clamp a backend score into the [0, 1] similarity range."""
    return min(max(float(score), 0.0), 1.0)


def mean_similarity(scores: Sequence[Score]) -> Score:
    """Arithmetic mean of the scores (0.0 for an empty sequence)."""
    if not scores:
        return 0.0
    return sum(scores) / len(scores)


def fit_dimension(vector: Sequence[float], dim: int) -> list[float]:
    """Zero-pad or truncate ``vector`` so that ``len(result) == dim``."""
    values = [float(x) for x in vector]
    if len(values) < dim:
        return values + [0.0] * (dim - len(values))
    return values[:dim]
