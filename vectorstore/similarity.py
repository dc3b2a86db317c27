# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-01-24
# Description: similarity.py
# -----------------------------------------------------------------------------
from typing import List, Optional, Sequence

import numpy as np

from embedding.EmbeddingRecord import EmbeddingRecord
from utility.errors import DimensionMismatchError
from vectorstore.VectorStore import SearchOptions, SearchResult


def cosine_similarity(a: Sequence[float] | np.ndarray, b: Sequence[float] | np.ndarray) -> float:
    """dot(a, b) / (|a| * |b|), or 0.0 when either vector has zero magnitude."""
    va = np.asarray(a, dtype=np.float64).reshape(-1)
    vb = np.asarray(b, dtype=np.float64).reshape(-1)
    if va.shape != vb.shape:
        raise DimensionMismatchError(f"Vector lengths differ: {va.shape[0]} != {vb.shape[0]}")
    denom = float(np.linalg.norm(va) * np.linalg.norm(vb))
    if denom == 0.0:
        return 0.0
    return float(np.dot(va, vb) / denom)


def cosine_similarities(query: np.ndarray, matrix: np.ndarray) -> np.ndarray:
    """Row-wise cosine similarity of `matrix` against `query`, zero-norm rows score 0."""
    q = np.asarray(query, dtype=np.float64).reshape(-1)
    m = np.asarray(matrix, dtype=np.float64)
    if m.size == 0:
        return np.zeros(0, dtype=np.float64)
    if m.ndim != 2 or m.shape[1] != q.shape[0]:
        raise DimensionMismatchError(
            f"Query vector has {q.shape[0]} dims, stored vectors have {m.shape[-1]}"
        )

    dots = m @ q
    denom = np.linalg.norm(m, axis=1) * np.linalg.norm(q)
    out = np.zeros_like(dots)
    np.divide(dots, denom, out=out, where=denom != 0)
    return out


def check_dimension(vector: Optional[np.ndarray], expected: Optional[int], what: str = "vector") -> None:
    if vector is None or expected is None:
        return
    if vector.shape[0] != expected:
        raise DimensionMismatchError(
            f"{what} has {vector.shape[0]} dims but the store holds {expected}-dim embeddings"
        )


def rank_by_similarity(
        query_vector: Sequence[float] | np.ndarray,
        candidates: Sequence[EmbeddingRecord],
        options: SearchOptions,
) -> List[SearchResult]:
    """
    Score pre-filtered candidates and apply the ranking contract:
    drop below min_similarity, sort by similarity desc then newest first, cut to limit.
    """
    usable = [c for c in candidates if c.embedding is not None]
    if not usable:
        return []

    scores = cosine_similarities(
        np.asarray(query_vector, dtype=np.float64),
        np.vstack([c.embedding for c in usable]),
    )

    scored = [
        SearchResult(record=rec, similarity=float(score))
        for rec, score in zip(usable, scores)
        if score >= options.min_similarity
    ]

    # id is the last resort so equal score + timestamp is still deterministic
    scored.sort(key=lambda r: r.record.id)
    scored.sort(key=lambda r: (r.similarity, r.record.created_at), reverse=True)
    return scored[: options.limit]
