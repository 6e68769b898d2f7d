"""
Similarity ranking.

Cosine similarity between a query vector and stored embeddings,
sim = dot(a, b) / (||a|| * ||b||), defined as 0 when either norm is 0.
Ranking is by descending similarity; ties keep insertion order.
"""

from __future__ import annotations

import numpy as np

from medical_rag_pipeline.core.errors import DimensionMismatchError


def cosine_similarity(a: np.ndarray, b: np.ndarray) -> float:
    """Calculate cosine similarity between two vectors."""
    a = np.asarray(a, dtype=np.float64)
    b = np.asarray(b, dtype=np.float64)
    if a.shape != b.shape:
        raise DimensionMismatchError(f"Cannot compare vectors of shape {a.shape} and {b.shape}")

    norm_a = np.linalg.norm(a)
    norm_b = np.linalg.norm(b)
    if norm_a == 0.0 or norm_b == 0.0:
        return 0.0
    # Clip float error so |a| == |b| still lands exactly in [-1, 1]
    return float(np.clip(np.dot(a, b) / (norm_a * norm_b), -1.0, 1.0))


def cosine_similarities(query: np.ndarray, matrix: np.ndarray) -> np.ndarray:
    """Cosine similarity of `query` against every row of `matrix`."""
    query = np.asarray(query, dtype=np.float64)
    matrix = np.asarray(matrix, dtype=np.float64)
    if matrix.shape[0] == 0:
        return np.zeros(0, dtype=np.float64)
    if matrix.ndim != 2 or query.shape != (matrix.shape[1],):
        raise DimensionMismatchError(
            f"Query of shape {query.shape} does not match stored vectors of shape {matrix.shape}"
        )

    denominators = np.linalg.norm(matrix, axis=1) * np.linalg.norm(query)
    dots = matrix @ query
    scores = np.zeros_like(dots)
    nonzero = denominators > 0
    scores[nonzero] = dots[nonzero] / denominators[nonzero]
    return np.clip(scores, -1.0, 1.0)


def top_k_indices(scores: np.ndarray, top_k: int) -> list[int]:
    """
    Indices of the top_k scores, highest first.

    Uses a stable sort on the negated scores so equal scores keep their
    original (insertion) order.
    """
    if top_k <= 0:
        raise ValueError("top_k must be a positive integer")
    order = np.argsort(-scores, kind="stable")
    return [int(i) for i in order[:top_k]]
