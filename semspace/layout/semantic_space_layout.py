from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Sequence

import numpy as np

from semspace.equations.builder import EquationSystem, NeighborhoodEquationBuilder
from semspace.landmarks.kmeans import KMeansLandmarkSelector, Landmark, LandmarkSelector
from semspace.landmarks.stress import (
    LandmarkLayoutEngine,
    SimilarityDistance,
    StressMajorizationLayout,
)
from semspace.layout.config import LayoutConfig
from semspace.layout.context import CancellationToken, LayoutCancelled, LayoutContext
from semspace.layout.settings import LayoutSettings
from semspace.logging import LOGGER
from semspace.sections import LAYOUT, SPARSE_VECTORS
from semspace.similarity.matrix import SimilarityMatrixBuilder
from semspace.solvers.lsqr import LinearSystemSolver, LsqrSolver, SolveReport
from semspace.vectors.sparse_vector import SparseVector


class LayoutStage(Enum):
    IDLE = "idle"
    LANDMARKS_CLUSTERED = "landmarks_clustered"
    LANDMARKS_EMBEDDED = "landmarks_embedded"
    SIMILARITIES_COMPUTED = "similarities_computed"
    EQUATIONS_BUILT = "equations_built"
    X_SOLVED = "x_solved"
    Y_SOLVED = "y_solved"
    DONE = "done"


@dataclass(frozen=True, eq=False)
class LayoutResult:
    positions: np.ndarray
    landmark_positions: np.ndarray
    landmarks: tuple[Landmark, ...]
    isolated: tuple[int, ...] = ()
    solve_reports: tuple[SolveReport, ...] = ()

    def __len__(self) -> int:
        return len(self.positions)

    def __getitem__(self, index: int) -> tuple[float, float]:
        x, y = self.positions[index]
        return float(x), float(y)

    @property
    def xs(self) -> np.ndarray:
        return self.positions[:, 0]

    @property
    def ys(self) -> np.ndarray:
        return self.positions[:, 1]

    def adjusted(self, settings: LayoutSettings) -> "LayoutResult":
        return replace(self, positions=settings.adjust_layout(self.positions))


class SemanticSpaceLayout:
    """Semantic map of sparse vectors: landmarks placed first, the rest by least squares."""

    def __init__(
        self,
        dataset: Sequence[SparseVector],
        config: LayoutConfig | None = None,
        *,
        context: LayoutContext | None = None,
        selector: LandmarkSelector | None = None,
        engine: LandmarkLayoutEngine | None = None,
        solver: LinearSystemSolver | None = None,
        cancel_token: CancellationToken | None = None,
    ) -> None:
        if dataset is None:
            raise ValueError("dataset must be provided")
        points = tuple(dataset)
        if not points:
            raise ValueError("dataset must be non-empty")
        for vec in points:
            if not isinstance(vec, SparseVector):
                raise TypeError("dataset items must be SparseVector instances")

        self._dataset = points
        self._config = config if config is not None else LayoutConfig()
        self._context = context if context is not None else LayoutContext(self._config.seed)
        self._selector = (
            selector
            if selector is not None
            else KMeansLandmarkSelector(
                max_iterations=self._config.kmeans_max_iterations,
                init=self._config.kmeans_init,
            )
        )
        self._engine = (
            engine
            if engine is not None
            else StressMajorizationLayout(
                eps=self._config.stress_eps,
                max_iterations=self._config.stress_max_iterations,
            )
        )
        self._solver = solver if solver is not None else LsqrSolver()
        self._cancel_token = cancel_token if cancel_token is not None else CancellationToken()
        self.stage = LayoutStage.IDLE

        nnz = [len(vec) for vec in points]
        LOGGER.event(
            "layout.init",
            section=LAYOUT,
            data={"points": len(points), "context_seed": self._context.seed, **self._config.as_dict()},
        )
        LOGGER.event(
            "layout.vectors",
            section=SPARSE_VECTORS,
            data={
                "nnz_min": min(nnz),
                "nnz_max": max(nnz),
                "nnz_avg": sum(nnz) / len(nnz),
                "empty": sum(1 for count in nnz if count == 0),
            },
        )

    @property
    def dataset(self) -> tuple[SparseVector, ...]:
        return self._dataset

    @property
    def config(self) -> LayoutConfig:
        return self._config

    @property
    def context(self) -> LayoutContext:
        return self._context

    def compute_layout(
        self,
        settings: LayoutSettings | None = None,
        *,
        cancel_token: CancellationToken | None = None,
    ) -> LayoutResult:
        token = cancel_token if cancel_token is not None else self._cancel_token
        self.stage = LayoutStage.IDLE
        rng_state = self._context.snapshot()
        try:
            return self._compute(settings, token)
        except LayoutCancelled as exc:
            self._context.restore(rng_state)
            LOGGER.event(
                "layout.cancelled",
                section=LAYOUT,
                level="warning",
                data={"stage": self.stage.value, "reason": str(exc)},
            )
            raise

    def _advance(self, stage: LayoutStage, **data: object) -> None:
        self.stage = stage
        LOGGER.event("layout.stage", section=LAYOUT, data={"stage": stage.value, **data})

    def _compute(self, settings: LayoutSettings | None, token: CancellationToken) -> LayoutResult:
        cfg = self._config
        rng = self._context.rng
        count = len(self._dataset)

        token.raise_if_cancelled("clustering")
        landmarks = tuple(
            self._selector.cluster(self._dataset, cfg.k, cfg.kmeans_eps, rng, cfg.kmeans_trials)
        )
        if not landmarks:
            raise ValueError("clustering returned no landmarks")
        centroids = tuple(landmark.centroid for landmark in landmarks)
        landmark_count = len(centroids)
        self._advance(LayoutStage.LANDMARKS_CLUSTERED, landmarks=landmark_count)

        token.raise_if_cancelled("landmark layout")
        landmark_similarities = SimilarityMatrixBuilder(
            cfg.landmark_threshold, similarity=cfg.similarity, block_size=cfg.block_size
        ).build(centroids, full=False)
        landmark_positions = np.asarray(
            self._engine.embed(landmark_count, SimilarityDistance(landmark_similarities), rng),
            dtype=np.float64,
        )
        if landmark_positions.shape != (landmark_count, 2):
            raise ValueError("landmark layout must return one 2D point per landmark")
        self._advance(LayoutStage.LANDMARKS_EMBEDDED)

        token.raise_if_cancelled("similarity computation")
        similarities = SimilarityMatrixBuilder(
            cfg.similarity_threshold, similarity=cfg.similarity, block_size=cfg.block_size
        ).build(self._dataset + centroids, full=True)
        self._advance(LayoutStage.SIMILARITIES_COMPUTED, pairs=similarities.nnz)

        token.raise_if_cancelled("equation construction")
        system = NeighborhoodEquationBuilder(
            cfg.neighborhood_size,
            landmark_neighbor_equations=cfg.landmark_neighbor_equations,
        ).build(similarities, count, landmark_count)
        self._advance(LayoutStage.EQUATIONS_BUILT, equations=len(system))

        reports: list[SolveReport] = []
        token.raise_if_cancelled("x solve")
        xs = self._solve_axis(system, landmark_positions[:, 0], reports)
        self._advance(LayoutStage.X_SOLVED)

        token.raise_if_cancelled("y solve")
        ys = self._solve_axis(system, landmark_positions[:, 1], reports)
        self._advance(LayoutStage.Y_SOLVED)

        positions = np.column_stack([xs[:count], ys[:count]])
        if settings is not None:
            positions = settings.adjust_layout(positions)
        result = LayoutResult(
            positions=positions,
            landmark_positions=landmark_positions,
            landmarks=landmarks,
            isolated=system.isolated,
            solve_reports=tuple(reports),
        )
        self._advance(LayoutStage.DONE, points=count, isolated=len(system.isolated))
        return result

    def _solve_axis(
        self,
        system: EquationSystem,
        anchor_values: np.ndarray,
        reports: list[SolveReport],
    ) -> np.ndarray:
        rhs = system.rhs(anchor_values)
        max_iterations = self._config.solver_max_iterations
        solve_with_report = getattr(self._solver, "solve_with_report", None)
        if solve_with_report is not None:
            solution, report = solve_with_report(
                system.num_unknowns, system.equations, rhs, max_iterations
            )
            reports.append(report)
        else:
            solution = self._solver.solve(system.num_unknowns, system.equations, rhs, max_iterations)
        solution = np.asarray(solution, dtype=np.float64)
        if solution.shape != (system.num_unknowns,):
            raise ValueError("solver must return one value per unknown")
        return solution
