from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Sequence

import numpy as np
from scipy import sparse

from semspace.logging import LOGGER
from semspace.sections import EQUATIONS
from semspace.similarity.matrix import SimilarityMatrix

EQUATION_KINDS = ("neighbor", "isolated", "anchor")


@dataclass(frozen=True)
class Equation:
    """One sparse row of the layout system; ``point`` is the column it constrains."""

    point: int
    columns: tuple[int, ...]
    coefficients: tuple[float, ...]
    kind: str
    landmark: int | None = None

    def __post_init__(self) -> None:
        if self.kind not in EQUATION_KINDS:
            raise ValueError(f"kind must be one of {EQUATION_KINDS}")
        if len(self.columns) != len(self.coefficients):
            raise ValueError("columns and coefficients must have the same length")
        if list(self.columns) != sorted(set(self.columns)):
            raise ValueError("columns must be strictly increasing")
        if self.point not in self.columns:
            raise ValueError("equation must contain its own column")
        if self.kind == "anchor" and self.landmark is None:
            raise ValueError("anchor equations must name their landmark")

    @property
    def self_coefficient(self) -> float:
        return self.coefficients[self.columns.index(self.point)]

    @property
    def neighbor_columns(self) -> tuple[int, ...]:
        return tuple(c for c in self.columns if c != self.point)

    @property
    def neighbor_coefficients(self) -> tuple[float, ...]:
        return tuple(w for c, w in zip(self.columns, self.coefficients) if c != self.point)

    @property
    def neighbor_weight_sum(self) -> float:
        return math.fsum(self.neighbor_coefficients)


@dataclass(frozen=True)
class EquationSystem:
    """Coefficient rows shared by every axis; only anchor right-hand sides vary."""

    num_points: int
    num_landmarks: int
    equations: tuple[Equation, ...]
    isolated: tuple[int, ...] = ()

    @property
    def num_unknowns(self) -> int:
        return self.num_points + self.num_landmarks

    @property
    def anchor_rows(self) -> tuple[int, ...]:
        return tuple(row for row, eq in enumerate(self.equations) if eq.kind == "anchor")

    def __len__(self) -> int:
        return len(self.equations)

    def rhs(self, anchor_values: Sequence[float]) -> np.ndarray:
        if len(anchor_values) != self.num_landmarks:
            raise ValueError("anchor_values must hold one value per landmark")
        values = np.zeros(len(self.equations), dtype=np.float64)
        for row, eq in enumerate(self.equations):
            if eq.kind == "anchor":
                values[row] = float(anchor_values[eq.landmark])
        return values


def equations_to_csr(num_unknowns: int, equations: Sequence[Equation]) -> sparse.csr_matrix:
    indptr = [0]
    columns: list[int] = []
    data: list[float] = []
    for eq in equations:
        columns.extend(eq.columns)
        data.extend(eq.coefficients)
        indptr.append(len(columns))
    return sparse.csr_matrix(
        (
            np.asarray(data, dtype=np.float64),
            np.asarray(columns, dtype=np.int64),
            np.asarray(indptr, dtype=np.int64),
        ),
        shape=(len(equations), num_unknowns),
    )


class NeighborhoodEquationBuilder:
    def __init__(self, neighborhood_size: int = 10, *, landmark_neighbor_equations: bool = False) -> None:
        if neighborhood_size < 1:
            raise ValueError("neighborhood_size must be >= 1")
        self._neighborhood_size = int(neighborhood_size)
        self._landmark_neighbor_equations = bool(landmark_neighbor_equations)

    @property
    def neighborhood_size(self) -> int:
        return self._neighborhood_size

    def neighbor_equation(self, point: int, neighbors: Sequence[tuple[int, float]]) -> Equation:
        count = min(self._neighborhood_size, len(neighbors))
        if count == 0:
            return Equation(point=point, columns=(point,), coefficients=(1.0,), kind="isolated")
        weight = 1.0 / count
        weights = [-weight] * (count - 1)
        # the least similar neighbor takes the rounding residue so the weights sum to -1
        weights.append(-1.0 - math.fsum(weights))
        used = [col for col, _ in neighbors[:count]]
        terms = sorted(list(zip(used, weights)) + [(point, 1.0)])
        return Equation(
            point=point,
            columns=tuple(col for col, _ in terms),
            coefficients=tuple(w for _, w in terms),
            kind="neighbor",
        )

    @staticmethod
    def anchor_equation(column: int, landmark: int) -> Equation:
        return Equation(
            point=column,
            columns=(column,),
            coefficients=(1.0,),
            kind="anchor",
            landmark=landmark,
        )

    def build(self, similarities: SimilarityMatrix, num_points: int, num_landmarks: int) -> EquationSystem:
        if num_points < 1:
            raise ValueError("num_points must be >= 1")
        if num_landmarks < 1:
            raise ValueError("num_landmarks must be >= 1")
        total = num_points + num_landmarks
        if similarities.size != total:
            raise ValueError("similarity matrix must cover points and landmarks")

        rows = num_points + (num_landmarks if self._landmark_neighbor_equations else 0)
        equations: list[Equation] = []
        isolated: list[int] = []
        for point in range(rows):
            eq = self.neighbor_equation(point, similarities.neighbors(point))
            if eq.kind == "isolated":
                isolated.append(point)
                LOGGER.event(
                    "equations.isolated",
                    section=EQUATIONS,
                    level="warning",
                    data={"point": point, "landmark": point >= num_points},
                )
            equations.append(eq)
        for landmark in range(num_landmarks):
            equations.append(self.anchor_equation(num_points + landmark, landmark))

        LOGGER.event(
            "equations.build",
            section=EQUATIONS,
            data={
                "points": num_points,
                "landmarks": num_landmarks,
                "equations": len(equations),
                "neighborhood_size": self._neighborhood_size,
                "isolated": len(isolated),
                "landmark_neighbor_equations": self._landmark_neighbor_equations,
            },
        )
        return EquationSystem(
            num_points=num_points,
            num_landmarks=num_landmarks,
            equations=tuple(equations),
            isolated=tuple(isolated),
        )
