"""
Vector distance helpers.

Dependencies: numpy
System role: Ranking of candidate vectors against a query vector
"""

from typing import Literal

import numpy as np

DistanceMetric = Literal["cosine", "euclidean"]


def compute_distances(
    query: list[float],
    vectors: list[list[float]],
    metric: DistanceMetric = "cosine",
) -> np.ndarray:
    """
    Distance from the query to every candidate vector, lower is closer.

    Cosine distance is ``1 - cos(query, v)``; a zero vector has distance 1
    to everything.

    Args:
        query: Query vector
        vectors: Candidate vectors, all with the query's dimension
        metric: "cosine" or "euclidean"

    Returns:
        np.ndarray: One distance per candidate
    """
    if not vectors:
        return np.empty(0, dtype=np.float64)

    q = np.asarray(query, dtype=np.float64)
    m = np.asarray(vectors, dtype=np.float64)

    if metric == "euclidean":
        return np.linalg.norm(m - q, axis=1)

    norms = np.linalg.norm(m, axis=1) * np.linalg.norm(q)
    dots = m @ q
    with np.errstate(divide="ignore", invalid="ignore"):
        cos = np.where(norms > 0, dots / norms, 0.0)
    return 1.0 - cos


def rank_nearest(distances: np.ndarray, top_k: int) -> list[int]:
    """Indices of the top_k smallest distances; equal distances keep input order."""
    order = np.argsort(distances, kind="stable")
    return [int(i) for i in order[:top_k]]
