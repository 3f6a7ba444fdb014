"""Vector similarity functions.

Each function raises ValueError on dimension mismatch or, where the measure
needs a direction, on zero-magnitude input.
"""

from collections.abc import Sequence

import numpy as np


def _as_arrays(a: Sequence[float], b: Sequence[float]) -> tuple[np.ndarray, np.ndarray]:
    va = np.asarray(a, dtype=float)
    vb = np.asarray(b, dtype=float)
    if va.shape != vb.shape:
        raise ValueError(f"Dimension mismatch: {len(va)} != {len(vb)}")
    return va, vb


def dot_product(a: Sequence[float], b: Sequence[float]) -> float:
    """Inner product. Unbounded; equals cosine similarity for unit vectors."""
    va, vb = _as_arrays(a, b)
    return float(np.dot(va, vb))


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """Cosine of the angle between two vectors, in [-1, 1]."""
    va, vb = _as_arrays(a, b)
    norm_a = np.linalg.norm(va)
    norm_b = np.linalg.norm(vb)
    if norm_a == 0.0 or norm_b == 0.0:
        raise ValueError("Cosine similarity is undefined for zero-magnitude vectors")
    # Clamp rounding noise so identical vectors score exactly 1.0
    return float(np.clip(np.dot(va, vb) / (norm_a * norm_b), -1.0, 1.0))


def euclidean_relevance(a: Sequence[float], b: Sequence[float]) -> float:
    """
    Relevance from Euclidean distance: 1 - distance / sqrt(2).

    For unit vectors the range is [1 - sqrt(2), 1]; for arbitrary vectors it
    is (-inf, 1].
    """
    va, vb = _as_arrays(a, b)
    return float(1.0 - np.linalg.norm(va - vb) / np.sqrt(2))
