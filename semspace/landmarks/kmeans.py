from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Protocol, Sequence

import numpy as np
from scipy import sparse

from semspace.logging import LOGGER
from semspace.sections import CLUSTERING
from semspace.vectors.sparse_vector import SparseVector, dataset_dimension, dataset_to_csr

KMEANS_INITS = ("kmeans++", "random")


@dataclass(frozen=True)
class Landmark:
    cluster_id: int
    centroid: SparseVector
    members: tuple[int, ...]


class LandmarkSelector(Protocol):
    def cluster(
        self,
        dataset: Sequence[SparseVector],
        k: int,
        eps: float,
        rng: random.Random,
        trials: int,
    ) -> list[Landmark]:
        ...


def _row_norms(matrix: sparse.csr_matrix) -> np.ndarray:
    return np.sqrt(np.asarray(matrix.multiply(matrix).sum(axis=1)).ravel())


def _normalize_rows(matrix: sparse.csr_matrix) -> sparse.csr_matrix:
    norms = _row_norms(matrix)
    inverse = np.divide(1.0, norms, out=np.zeros_like(norms), where=norms > 0)
    return sparse.csr_matrix(sparse.diags(inverse) @ matrix)


def _row_to_sparse_vector(matrix: sparse.csr_matrix, row: int) -> SparseVector:
    start, stop = matrix.indptr[row], matrix.indptr[row + 1]
    return SparseVector(matrix.indices[start:stop].tolist(), matrix.data[start:stop].tolist())


class KMeansLandmarkSelector:
    """Cosine k-means; landmarks are the L2-normalized cluster centroids."""

    def __init__(self, *, max_iterations: int = 100, init: str = "kmeans++") -> None:
        if max_iterations <= 0:
            raise ValueError("max_iterations must be positive")
        if init not in KMEANS_INITS:
            raise ValueError("init must be 'kmeans++' or 'random'")
        self._max_iterations = int(max_iterations)
        self._init = init

    def cluster(
        self,
        dataset: Sequence[SparseVector],
        k: int,
        eps: float,
        rng: random.Random,
        trials: int = 1,
    ) -> list[Landmark]:
        if not dataset:
            raise ValueError("dataset must be non-empty")
        if k < 2:
            raise ValueError("k must be >= 2")
        if k > len(dataset):
            raise ValueError("k must not exceed the number of points")
        if eps < 0:
            raise ValueError("eps must be >= 0")
        if trials <= 0:
            raise ValueError("trials must be positive")

        dimension = dataset_dimension(dataset)
        raw = dataset_to_csr(dataset, dimension)
        points = _normalize_rows(raw)
        count = points.shape[0]
        rows = np.arange(count)

        best_assignment: np.ndarray | None = None
        best_quality = -np.inf
        for trial in range(trials):
            seeds = self._seed_indices(points, k, rng)
            centroids = points[seeds]
            prev_quality = -np.inf
            iterations = 0
            while True:
                iterations += 1
                sims = (points @ centroids.T).toarray()
                assignment = np.argmax(sims, axis=1)
                quality = float(sims[rows, assignment].mean())
                if quality - prev_quality <= eps or iterations >= self._max_iterations:
                    break
                prev_quality = quality
                centroids = self._recompute_centroids(points, assignment, centroids)
            LOGGER.event(
                "clustering.trial",
                section=CLUSTERING,
                level="debug",
                data={
                    "trial": trial,
                    "iterations": iterations,
                    "quality": quality,
                },
            )
            if best_assignment is None or quality > best_quality:
                best_assignment = assignment
                best_quality = quality

        landmarks = self._build_landmarks(raw, best_assignment, k)
        sizes = [len(landmark.members) for landmark in landmarks]
        LOGGER.event(
            "clustering.done",
            section=CLUSTERING,
            data={
                "points": count,
                "k": k,
                "trials": trials,
                "quality": best_quality,
                "empty_clusters": sum(1 for size in sizes if size == 0),
                "largest_cluster": max(sizes),
            },
        )
        return landmarks

    def _seed_indices(self, points: sparse.csr_matrix, k: int, rng: random.Random) -> list[int]:
        count = points.shape[0]
        if self._init == "random":
            return rng.sample(range(count), k)
        norms = _row_norms(points)
        nonzero = norms > 0
        candidates = [i for i in range(count) if nonzero[i]]
        if not candidates:
            return rng.sample(range(count), k)

        def similarities_to(idx: int) -> np.ndarray:
            return np.asarray((points @ points[idx].T).toarray()).ravel()

        seeds = [candidates[rng.randrange(len(candidates))]]
        best_sim = similarities_to(seeds[0])
        while len(seeds) < k:
            weights = np.clip(1.0 - best_sim, 0.0, None) ** 2
            weights[~nonzero] = 0.0
            weights[seeds] = 0.0
            total = float(weights.sum())
            if total > 0:
                target = rng.random() * total
                idx = int(np.searchsorted(np.cumsum(weights), target, side="right"))
                if idx >= count:
                    idx = int(np.flatnonzero(weights)[-1])
            else:
                remaining = [i for i in candidates if i not in seeds] or [
                    i for i in range(count) if i not in seeds
                ]
                idx = remaining[rng.randrange(len(remaining))]
            seeds.append(idx)
            best_sim = np.maximum(best_sim, similarities_to(idx))
        return seeds

    @staticmethod
    def _membership(assignment: np.ndarray, k: int) -> sparse.csr_matrix:
        count = len(assignment)
        return sparse.csr_matrix(
            (np.ones(count), (assignment, np.arange(count))), shape=(k, count)
        )

    def _recompute_centroids(
        self, points: sparse.csr_matrix, assignment: np.ndarray, previous: sparse.csr_matrix
    ) -> sparse.csr_matrix:
        k = previous.shape[0]
        sums = sparse.csr_matrix(self._membership(assignment, k) @ points)
        filled = (_row_norms(sums) > 0).astype(np.float64)
        # empty clusters keep their previous centroid
        centroids = sparse.csr_matrix(
            sparse.diags(filled) @ _normalize_rows(sums)
            + sparse.diags(1.0 - filled) @ previous
        )
        centroids.eliminate_zeros()
        return centroids

    def _build_landmarks(
        self, raw: sparse.csr_matrix, assignment: np.ndarray, k: int
    ) -> list[Landmark]:
        sums = sparse.csr_matrix(self._membership(assignment, k) @ raw)
        sums.eliminate_zeros()
        sums.sort_indices()
        landmarks: list[Landmark] = []
        for cluster_id in range(k):
            members = tuple(int(i) for i in np.flatnonzero(assignment == cluster_id))
            centroid = SparseVector()
            if members:
                centroid = _row_to_sparse_vector(sums, cluster_id).normalized()
            landmarks.append(
                Landmark(cluster_id=cluster_id, centroid=centroid, members=members)
            )
        return landmarks
