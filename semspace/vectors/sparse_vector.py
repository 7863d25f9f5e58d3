from __future__ import annotations

import math
from typing import Iterable, Iterator, Mapping, Sequence

import numpy as np
from scipy import sparse


class SparseVector:
    """Immutable (index, value) pairs with strictly increasing indices and no zeros."""

    __slots__ = ("_indices", "_values")

    def __init__(self, indices: Sequence[int] = (), values: Sequence[float] = ()) -> None:
        if len(indices) != len(values):
            raise ValueError("indices and values must have the same length")
        idx = tuple(int(i) for i in indices)
        vals = tuple(float(v) for v in values)
        prev = -1
        for i, v in zip(idx, vals):
            if i <= prev:
                raise ValueError("indices must be non-negative and strictly increasing")
            if not math.isfinite(v):
                raise ValueError("values must be finite")
            if v == 0.0:
                raise ValueError("zero values must be omitted")
            prev = i
        self._indices = idx
        self._values = vals

    @classmethod
    def from_pairs(cls, pairs: Iterable[tuple[int, float]]) -> "SparseVector":
        merged: dict[int, float] = {}
        for index, value in pairs:
            if index < 0:
                raise ValueError("indices must be non-negative")
            merged[int(index)] = merged.get(int(index), 0.0) + float(value)
        items = sorted((i, v) for i, v in merged.items() if v != 0.0)
        return cls([i for i, _ in items], [v for _, v in items])

    @classmethod
    def from_mapping(cls, mapping: Mapping[int, float]) -> "SparseVector":
        return cls.from_pairs(mapping.items())

    @classmethod
    def from_dense(cls, values: Sequence[float]) -> "SparseVector":
        return cls.from_pairs((i, v) for i, v in enumerate(values) if v != 0)

    @property
    def indices(self) -> tuple[int, ...]:
        return self._indices

    @property
    def values(self) -> tuple[float, ...]:
        return self._values

    @property
    def last_index(self) -> int:
        return self._indices[-1] if self._indices else -1

    def norm(self) -> float:
        return math.sqrt(sum(v * v for v in self._values))

    def normalized(self) -> "SparseVector":
        length = self.norm()
        if length == 0.0:
            return self
        return SparseVector(self._indices, [v / length for v in self._values])

    def dot(self, other: "SparseVector") -> float:
        i = j = 0
        total = 0.0
        a_idx, b_idx = self._indices, other._indices
        while i < len(a_idx) and j < len(b_idx):
            if a_idx[i] < b_idx[j]:
                i += 1
            elif a_idx[i] > b_idx[j]:
                j += 1
            else:
                total += self._values[i] * other._values[j]
                i += 1
                j += 1
        return total

    def get(self, index: int, default: float = 0.0) -> float:
        for i, v in zip(self._indices, self._values):
            if i == index:
                return v
            if i > index:
                break
        return default

    def __len__(self) -> int:
        return len(self._indices)

    def __iter__(self) -> Iterator[tuple[int, float]]:
        return iter(zip(self._indices, self._values))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SparseVector):
            return NotImplemented
        return self._indices == other._indices and self._values == other._values

    def __hash__(self) -> int:
        return hash((self._indices, self._values))

    def __repr__(self) -> str:
        return f"SparseVector(nnz={len(self._indices)}, last_index={self.last_index})"


def dataset_dimension(dataset: Sequence[SparseVector]) -> int:
    return max((vec.last_index for vec in dataset), default=-1) + 1


def dataset_to_csr(dataset: Sequence[SparseVector], dimension: int | None = None) -> sparse.csr_matrix:
    for vec in dataset:
        if not isinstance(vec, SparseVector):
            raise TypeError("dataset items must be SparseVector instances")
    if dimension is None:
        dimension = dataset_dimension(dataset)
    indptr = np.zeros(len(dataset) + 1, dtype=np.int64)
    for row, vec in enumerate(dataset):
        indptr[row + 1] = indptr[row] + len(vec)
    indices = np.fromiter(
        (i for vec in dataset for i in vec.indices), dtype=np.int64, count=int(indptr[-1])
    )
    data = np.fromiter(
        (v for vec in dataset for v in vec.values), dtype=np.float64, count=int(indptr[-1])
    )
    return sparse.csr_matrix(
        (data, indices, indptr), shape=(len(dataset), max(int(dimension), 1))
    )
