from __future__ import annotations

import random
from typing import Callable, Protocol

import numpy as np

from semspace.logging import LOGGER
from semspace.sections import LANDMARK_LAYOUT
from semspace.similarity.matrix import SimilarityMatrix

DistanceFn = Callable[[int, int], float]


class LandmarkLayoutEngine(Protocol):
    def embed(self, n: int, distance: DistanceFn, rng: random.Random) -> np.ndarray:
        ...


class SimilarityDistance:
    """``1 - similarity``; pairs missing from the sparse matrix count as similarity 0."""

    def __init__(self, similarities: SimilarityMatrix, *, default_similarity: float = 0.0) -> None:
        self._similarities = similarities
        self._default = float(default_similarity)

    def __call__(self, a: int, b: int) -> float:
        if a == b:
            return 0.0
        lo, hi = (a, b) if a < b else (b, a)
        sim = self._similarities.get(lo, hi, self._default)
        return min(1.0, max(0.0, 1.0 - sim))


def _pairwise_distances(points: np.ndarray) -> np.ndarray:
    diff = points[:, None, :] - points[None, :, :]
    return np.sqrt((diff * diff).sum(axis=2))


class StressMajorizationLayout:
    """SMACOF placement of ``n`` items in 2D from a distance function."""

    def __init__(self, *, eps: float = 1e-4, max_iterations: int = 300) -> None:
        if eps < 0:
            raise ValueError("eps must be >= 0")
        if max_iterations <= 0:
            raise ValueError("max_iterations must be positive")
        self._eps = float(eps)
        self._max_iterations = int(max_iterations)

    @staticmethod
    def target_distances(n: int, distance: DistanceFn) -> np.ndarray:
        target = np.zeros((n, n), dtype=np.float64)
        for i in range(n):
            for j in range(i + 1, n):
                d = float(distance(i, j))
                if not np.isfinite(d) or d < 0:
                    raise ValueError("distance must be finite and >= 0")
                target[i, j] = target[j, i] = d
        return target

    @staticmethod
    def stress(positions: np.ndarray, target: np.ndarray) -> float:
        upper = np.triu_indices(len(positions), k=1)
        residual = _pairwise_distances(positions)[upper] - target[upper]
        return float((residual * residual).sum())

    def embed(self, n: int, distance: DistanceFn, rng: random.Random) -> np.ndarray:
        if n <= 0:
            raise ValueError("n must be positive")
        if n == 1:
            return np.zeros((1, 2), dtype=np.float64)
        target = self.target_distances(n, distance)
        positions = np.array(
            [[rng.random(), rng.random()] for _ in range(n)], dtype=np.float64
        )
        iterations = 0
        movement = 0.0
        for iterations in range(1, self._max_iterations + 1):
            current = _pairwise_distances(positions)
            ratio = np.divide(
                target, current, out=np.zeros_like(target), where=current > 0
            )
            b = -ratio
            np.fill_diagonal(b, 0.0)
            np.fill_diagonal(b, -b.sum(axis=1))
            updated = b @ positions / n
            movement = float(np.max(np.linalg.norm(updated - positions, axis=1)))
            positions = updated
            if movement < self._eps:
                break
        LOGGER.event(
            "landmark_layout.done",
            section=LANDMARK_LAYOUT,
            data={
                "landmarks": n,
                "iterations": iterations,
                "movement": movement,
                "stress": self.stress(positions, target),
            },
        )
        return positions
