from __future__ import annotations

import json
from dataclasses import asdict, dataclass, fields
from typing import Any, Mapping

from semspace.landmarks.kmeans import KMEANS_INITS
from semspace.similarity.matrix import SIMILARITY_MODES


@dataclass(frozen=True)
class LayoutConfig:
    k: int = 100
    kmeans_eps: float = 0.01
    kmeans_trials: int = 1
    kmeans_max_iterations: int = 100
    kmeans_init: str = "kmeans++"
    similarity_threshold: float = 0.005
    landmark_similarity_threshold: float | None = None
    neighborhood_size: int = 10
    similarity: str = "cosine"
    stress_eps: float = 1e-4
    stress_max_iterations: int = 300
    solver_max_iterations: int | None = None
    landmark_neighbor_equations: bool = False
    block_size: int = 1024
    seed: int = 1

    def __post_init__(self) -> None:
        if self.k < 2:
            raise ValueError("k must be >= 2")
        if self.kmeans_eps < 0:
            raise ValueError("kmeans_eps must be >= 0")
        if self.kmeans_trials <= 0:
            raise ValueError("kmeans_trials must be positive")
        if self.kmeans_max_iterations <= 0:
            raise ValueError("kmeans_max_iterations must be positive")
        if self.kmeans_init not in KMEANS_INITS:
            raise ValueError("kmeans_init must be 'kmeans++' or 'random'")
        if self.similarity_threshold < 0:
            raise ValueError("similarity_threshold must be >= 0")
        if self.landmark_similarity_threshold is not None and self.landmark_similarity_threshold < 0:
            raise ValueError("landmark_similarity_threshold must be >= 0 when set")
        if self.neighborhood_size < 1:
            raise ValueError("neighborhood_size must be >= 1")
        if self.similarity not in SIMILARITY_MODES:
            raise ValueError("similarity must be 'cosine' or 'dot'")
        if self.stress_eps < 0:
            raise ValueError("stress_eps must be >= 0")
        if self.stress_max_iterations <= 0:
            raise ValueError("stress_max_iterations must be positive")
        if self.solver_max_iterations is not None and self.solver_max_iterations <= 0:
            raise ValueError("solver_max_iterations must be positive when set")
        if self.block_size <= 0:
            raise ValueError("block_size must be positive")

    @property
    def landmark_threshold(self) -> float:
        if self.landmark_similarity_threshold is None:
            return self.similarity_threshold
        return self.landmark_similarity_threshold

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Any]) -> "LayoutConfig":
        known = {field.name for field in fields(cls)}
        unknown = sorted(set(mapping) - known)
        if unknown:
            raise ValueError(f"unknown layout config keys: {', '.join(unknown)}")
        return cls(**dict(mapping))

    def as_dict(self) -> dict[str, Any]:
        return asdict(self)


def load_config(path: str) -> LayoutConfig:
    if not path:
        raise ValueError("path must be provided")
    with open(path, "r", encoding="utf-8") as fp:
        payload = json.load(fp)
    if not isinstance(payload, dict):
        raise ValueError("layout config file must contain a JSON object")
    return LayoutConfig.from_mapping(payload)
