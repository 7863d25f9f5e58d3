from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, Sequence

import numpy as np
from scipy import sparse

from semspace.logging import LOGGER
from semspace.sections import SIMILARITY
from semspace.vectors.sparse_vector import SparseVector, dataset_to_csr

SIMILARITY_MODES = ("cosine", "dot")


@dataclass(frozen=True)
class SimilarityEntry:
    row: int
    col: int
    value: float


def dot_product_similarity(a: SparseVector, b: SparseVector) -> float:
    return a.dot(b)


def cosine_similarity(a: SparseVector, b: SparseVector) -> float:
    if len(a) == 0 or len(b) == 0:
        return 0.0
    len_mult = a.norm() * b.norm()
    # all-zero vectors are similar to nothing
    if len_mult == 0.0:
        return 0.0
    return min(1.0, a.dot(b) / len_mult)


class SimilarityMatrix:
    """Thresholded pairwise similarities; the diagonal is never stored."""

    def __init__(self, matrix: sparse.spmatrix, *, full: bool, threshold: float) -> None:
        rows, cols = matrix.shape
        if rows != cols:
            raise ValueError("similarity matrix must be square")
        self._matrix = sparse.csr_matrix(matrix)
        self._matrix.sort_indices()
        self._transposed: sparse.csr_matrix | None = None
        self._full = bool(full)
        self._threshold = float(threshold)

    @property
    def size(self) -> int:
        return self._matrix.shape[0]

    @property
    def full(self) -> bool:
        return self._full

    @property
    def threshold(self) -> float:
        return self._threshold

    @property
    def nnz(self) -> int:
        return int(self._matrix.nnz)

    def _row_slice(self, matrix: sparse.csr_matrix, i: int) -> tuple[np.ndarray, np.ndarray]:
        start, stop = matrix.indptr[i], matrix.indptr[i + 1]
        return matrix.indices[start:stop], matrix.data[start:stop]

    def get(self, i: int, j: int, default: float = 0.0) -> float:
        if not (0 <= i < self.size and 0 <= j < self.size):
            raise IndexError("similarity index out of range")
        if i == j:
            return default
        if not self._full and i > j:
            i, j = j, i
        cols, vals = self._row_slice(self._matrix, i)
        pos = int(np.searchsorted(cols, j))
        if pos < len(cols) and cols[pos] == j:
            return float(vals[pos])
        return default

    def row(self, i: int) -> list[tuple[int, float]]:
        if not 0 <= i < self.size:
            raise IndexError("similarity index out of range")
        cols, vals = self._row_slice(self._matrix, i)
        items = [(int(c), float(v)) for c, v in zip(cols, vals)]
        if not self._full:
            if self._transposed is None:
                self._transposed = self._matrix.T.tocsr()
                self._transposed.sort_indices()
            lower_cols, lower_vals = self._row_slice(self._transposed, i)
            items = [(int(c), float(v)) for c, v in zip(lower_cols, lower_vals)] + items
        return items

    def neighbors(self, i: int) -> list[tuple[int, float]]:
        """Row ``i`` without ``i`` itself, most similar first, ties by index."""
        items = [(col, value) for col, value in self.row(i) if col != i]
        items.sort(key=lambda item: (-item[1], item[0]))
        return items

    def entries(self) -> Iterator[SimilarityEntry]:
        coo = self._matrix.tocoo()
        for r, c, v in zip(coo.row, coo.col, coo.data):
            yield SimilarityEntry(row=int(r), col=int(c), value=float(v))

    def to_csr(self) -> sparse.csr_matrix:
        return self._matrix.copy()


class SimilarityMatrixBuilder:
    def __init__(
        self,
        threshold: float = 0.005,
        *,
        similarity: str = "cosine",
        block_size: int = 1024,
    ) -> None:
        if threshold < 0:
            raise ValueError("threshold must be >= 0")
        if similarity not in SIMILARITY_MODES:
            raise ValueError("similarity must be 'cosine' or 'dot'")
        if block_size <= 0:
            raise ValueError("block_size must be positive")
        self._threshold = float(threshold)
        self._similarity = similarity
        self._block_size = int(block_size)

    @property
    def threshold(self) -> float:
        return self._threshold

    @property
    def similarity(self) -> str:
        return self._similarity

    def _prepare(self, dataset: Sequence[SparseVector]) -> sparse.csr_matrix:
        matrix = dataset_to_csr(dataset)
        if self._similarity == "cosine":
            norms = np.sqrt(np.asarray(matrix.multiply(matrix).sum(axis=1)).ravel())
            inverse = np.divide(1.0, norms, out=np.zeros_like(norms), where=norms > 0)
            matrix = sparse.csr_matrix(sparse.diags(inverse) @ matrix)
        return matrix

    def build(self, dataset: Sequence[SparseVector], *, full: bool = True) -> SimilarityMatrix:
        if not dataset:
            raise ValueError("dataset must be non-empty")
        matrix = self._prepare(dataset)
        count = matrix.shape[0]
        rows: list[np.ndarray] = []
        cols: list[np.ndarray] = []
        vals: list[np.ndarray] = []
        # block rows against the columns at or after the block start (upper triangle only)
        for start in range(0, count, self._block_size):
            stop = min(start + self._block_size, count)
            product = (matrix[start:stop] @ matrix[start:].T).tocoo()
            r = product.row.astype(np.int64) + start
            c = product.col.astype(np.int64) + start
            v = product.data
            if self._similarity == "cosine":
                v = np.minimum(v, 1.0)
            keep = (c > r) & (v >= self._threshold) & (v != 0.0)
            rows.append(r[keep])
            cols.append(c[keep])
            vals.append(v[keep])
        upper = sparse.csr_matrix(
            (
                np.concatenate(vals) if vals else np.zeros(0),
                (
                    np.concatenate(rows) if rows else np.zeros(0, dtype=np.int64),
                    np.concatenate(cols) if cols else np.zeros(0, dtype=np.int64),
                ),
            ),
            shape=(count, count),
        )
        result = sparse.csr_matrix(upper + upper.T) if full else upper
        LOGGER.event(
            "similarity.build",
            section=SIMILARITY,
            data={
                "points": count,
                "similarity": self._similarity,
                "threshold": self._threshold,
                "full": full,
                "pairs": int(upper.nnz),
                "block_size": self._block_size,
            },
        )
        return SimilarityMatrix(result, full=full, threshold=self._threshold)
