"""Sparse weighted feature vectors and their matrix form."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

import numpy as np
from scipy.sparse import csr_matrix

if TYPE_CHECKING:
    from numpy.typing import NDArray


@dataclass
class WeightedVector:
    """
    Term weights of one document, ascending by term identifier.

    Attributes:
        term_ids (NDArray[np.int64]): Identifiers of the terms kept after filtering.
        weights (NDArray[np.float64]): Weight of each term, aligned with ``term_ids``.
    """

    term_ids: NDArray[np.int64] = field(default_factory=lambda: np.array([], dtype=np.int64))
    weights: NDArray[np.float64] = field(default_factory=lambda: np.array([], dtype=np.float64))

    def __post_init__(self) -> None:
        self.term_ids = np.asarray(self.term_ids, dtype=np.int64)
        self.weights = np.asarray(self.weights, dtype=np.float64)
        if self.term_ids.shape != self.weights.shape:
            raise ValueError(
                f"term_ids and weights differ in shape: {self.term_ids.shape} != {self.weights.shape}"
            )

    def __len__(self) -> int:
        return len(self.term_ids)

    def __iter__(self) -> Iterator[tuple[int, float]]:
        return zip(self.term_ids.tolist(), self.weights.tolist())

    def as_dict(self) -> dict[int, float]:
        return dict(zip(self.term_ids.tolist(), self.weights.tolist()))

    def norm(self) -> float:
        return float(np.linalg.norm(self.weights))

    def to_csr(self, n_features: int | None = None) -> csr_matrix:
        """Single-row sparse matrix; columns are term identifiers."""
        if n_features is None:
            n_features = int(self.term_ids[-1]) + 1 if len(self) else 0
        indptr = np.array([0, len(self)], dtype=np.int64)
        return csr_matrix((self.weights, self.term_ids, indptr), shape=(1, n_features))

    def to_svmlight(self, label: int) -> str:
        """Render as an SVMlight/libsvm line: ``label id:weight id:weight ...``."""
        features = " ".join(f"{term_id}:{weight:g}" for term_id, weight in self)
        return f"{label} {features}".rstrip()


def stack_vectors(vectors: Iterable[WeightedVector], n_features: int) -> csr_matrix:
    """
    Stack document vectors into an ``(n_docs, n_features)`` CSR matrix.

    Args:
        vectors: One vector per document (row order is kept).
        n_features: Number of columns; must exceed every term identifier.

    Returns:
        Sparse document-term weight matrix.
    """
    indptr = [0]
    indices: list[NDArray[np.int64]] = []
    data: list[NDArray[np.float64]] = []
    for vector in vectors:
        indices.append(vector.term_ids)
        data.append(vector.weights)
        indptr.append(indptr[-1] + len(vector))

    if not indices:
        return csr_matrix((0, n_features), dtype=np.float64)
    return csr_matrix(
        (np.concatenate(data), np.concatenate(indices), np.array(indptr, dtype=np.int64)),
        shape=(len(indptr) - 1, n_features),
    )
