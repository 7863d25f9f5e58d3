from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, Sequence

import numpy as np
from scipy.sparse.linalg import lsqr

from semspace.equations.builder import Equation, equations_to_csr
from semspace.logging import LOGGER
from semspace.sections import SOLVE

ITERATION_LIMIT_REACHED = 7


class LinearSystemSolver(Protocol):
    def solve(
        self,
        num_unknowns: int,
        equations: Sequence[Equation],
        rhs: Sequence[float],
        max_iterations: int | None = None,
    ) -> np.ndarray:
        ...


@dataclass(frozen=True)
class SolveReport:
    stop_reason: int
    iterations: int
    max_iterations: int
    residual_norm: float

    @property
    def converged(self) -> bool:
        return self.stop_reason != ITERATION_LIMIT_REACHED


def default_max_iterations(num_unknowns: int, num_equations: int) -> int:
    return num_unknowns + num_equations + 50


class LsqrSolver:
    """Sparse least squares with LSQR; every call is independent."""

    def __init__(
        self,
        *,
        atol: float = 1e-8,
        btol: float = 1e-8,
        conlim: float = 1e8,
        initial_solution: Sequence[float] | None = None,
    ) -> None:
        if atol < 0 or btol < 0:
            raise ValueError("atol and btol must be >= 0")
        if conlim <= 0:
            raise ValueError("conlim must be positive")
        self._atol = float(atol)
        self._btol = float(btol)
        self._conlim = float(conlim)
        self._initial_solution = (
            None if initial_solution is None else np.asarray(initial_solution, dtype=np.float64)
        )

    def solve(
        self,
        num_unknowns: int,
        equations: Sequence[Equation],
        rhs: Sequence[float],
        max_iterations: int | None = None,
    ) -> np.ndarray:
        solution, _ = self.solve_with_report(num_unknowns, equations, rhs, max_iterations)
        return solution

    def solve_with_report(
        self,
        num_unknowns: int,
        equations: Sequence[Equation],
        rhs: Sequence[float],
        max_iterations: int | None = None,
    ) -> tuple[np.ndarray, SolveReport]:
        if num_unknowns <= 0:
            raise ValueError("num_unknowns must be positive")
        if not equations:
            raise ValueError("equations must be non-empty")
        b = np.asarray(rhs, dtype=np.float64)
        if b.shape != (len(equations),):
            raise ValueError("rhs must hold one value per equation")
        if not np.all(np.isfinite(b)):
            raise ValueError("rhs must be finite")
        for eq in equations:
            if eq.columns and (eq.columns[0] < 0 or eq.columns[-1] >= num_unknowns):
                raise ValueError("equation column outside the unknowns")
        if max_iterations is None:
            max_iterations = default_max_iterations(num_unknowns, len(equations))
        if max_iterations <= 0:
            raise ValueError("max_iterations must be positive")
        x0 = self._initial_solution
        if x0 is not None and x0.shape != (num_unknowns,):
            raise ValueError("initial_solution must hold one value per unknown")

        matrix = equations_to_csr(num_unknowns, equations)
        result = lsqr(
            matrix,
            b,
            atol=self._atol,
            btol=self._btol,
            conlim=self._conlim,
            iter_lim=int(max_iterations),
            x0=x0,
        )
        solution = np.asarray(result[0], dtype=np.float64)
        report = SolveReport(
            stop_reason=int(result[1]),
            iterations=int(result[2]),
            max_iterations=int(max_iterations),
            residual_norm=float(result[3]),
        )
        LOGGER.event(
            "solve.lsqr",
            section=SOLVE,
            level="info" if report.converged else "warning",
            data={
                "unknowns": num_unknowns,
                "equations": len(equations),
                "iterations": report.iterations,
                "max_iterations": report.max_iterations,
                "stop_reason": report.stop_reason,
                "residual_norm": report.residual_norm,
            },
        )
        return solution, report
