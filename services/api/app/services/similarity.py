"""Cosine similarity and corpus ranking."""
from __future__ import annotations

from typing import List, Sequence

import numpy as np

from relay_shared import RankedDoc

from .corpus import CorpusStore


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """Cosine of the angle between two vectors of identical length.

    Returns 0.0 when either vector has zero norm.
    """

    left = np.asarray(a, dtype=np.float64)
    right = np.asarray(b, dtype=np.float64)
    if left.shape != right.shape:
        raise ValueError(f"vector length mismatch: {left.shape[0]} != {right.shape[0]}")

    denominator = float(np.linalg.norm(left) * np.linalg.norm(right))
    if denominator == 0.0:
        return 0.0
    return float(np.clip(np.dot(left, right) / denominator, -1.0, 1.0))


def rank_documents(corpus: CorpusStore, query: Sequence[float]) -> List[RankedDoc]:
    """Score every corpus record against ``query``, best first.

    Ties keep corpus order.
    """

    if corpus.is_empty:
        return []

    query_vector = np.asarray(query, dtype=np.float64)
    if query_vector.shape != (corpus.dimension,):
        raise ValueError(f"query dimension {query_vector.shape[-1]} does not match corpus dimension {corpus.dimension}")

    matrix = corpus.matrix
    norms = np.linalg.norm(matrix, axis=1) * np.linalg.norm(query_vector)
    dots = matrix @ query_vector
    similarities = np.divide(dots, norms, out=np.zeros_like(dots), where=norms != 0)
    np.clip(similarities, -1.0, 1.0, out=similarities)

    order = np.argsort(-similarities, kind="stable")
    return [
        RankedDoc(
            id=corpus.records[index].id,
            text=corpus.records[index].text,
            similarity=float(similarities[index]),
        )
        for index in order
    ]


def top_k(ranked: Sequence[RankedDoc], k: int) -> List[RankedDoc]:
    return list(ranked[: max(k, 0)])
