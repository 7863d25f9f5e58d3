from __future__ import annotations

import numpy as np
import pytest

from semspace.equations import Equation
from semspace.solvers import LsqrSolver, default_max_iterations


def _chain() -> list[Equation]:
    # x0 follows x1, x1 is anchored
    return [
        Equation(point=0, columns=(0, 1), coefficients=(1.0, -1.0), kind="neighbor"),
        Equation(point=1, columns=(1,), coefficients=(1.0,), kind="anchor", landmark=0),
    ]


def test_exact_system_is_solved() -> None:
    solution = LsqrSolver().solve(2, _chain(), [0.0, 3.0])
    assert solution.shape == (2,)
    assert solution == pytest.approx([3.0, 3.0], abs=1e-6)


def test_overdetermined_system_returns_least_squares_fit() -> None:
    equations = [
        Equation(point=0, columns=(0,), coefficients=(1.0,), kind="anchor", landmark=0),
        Equation(point=0, columns=(0,), coefficients=(1.0,), kind="anchor", landmark=1),
    ]
    solution = LsqrSolver().solve(1, equations, [1.0, 3.0])
    assert solution[0] == pytest.approx(2.0, abs=1e-6)


def test_report_describes_the_run() -> None:
    solution, report = LsqrSolver().solve_with_report(2, _chain(), [0.0, -2.0])
    assert solution == pytest.approx([-2.0, -2.0], abs=1e-6)
    assert report.converged
    assert report.max_iterations == default_max_iterations(2, 2) == 54
    assert 0 < report.iterations <= report.max_iterations
    assert report.residual_norm == pytest.approx(0.0, abs=1e-6)


def test_iteration_cap_is_honored() -> None:
    _, report = LsqrSolver().solve_with_report(2, _chain(), [0.0, 3.0], max_iterations=1)
    assert report.iterations <= 1
    assert report.max_iterations == 1


def test_initial_solution_is_used() -> None:
    solver = LsqrSolver(initial_solution=[3.0, 3.0])
    solution = solver.solve(2, _chain(), [0.0, 3.0])
    assert solution == pytest.approx([3.0, 3.0], abs=1e-9)


def test_dimension_mismatches_are_rejected() -> None:
    solver = LsqrSolver()
    with pytest.raises(ValueError):
        solver.solve(0, _chain(), [0.0, 3.0])
    with pytest.raises(ValueError):
        solver.solve(2, [], [])
    with pytest.raises(ValueError):
        solver.solve(2, _chain(), [0.0])
    with pytest.raises(ValueError):
        solver.solve(1, _chain(), [0.0, 3.0])
    with pytest.raises(ValueError):
        solver.solve(2, _chain(), [0.0, np.nan])
    with pytest.raises(ValueError):
        solver.solve(2, _chain(), [0.0, 3.0], max_iterations=0)
    with pytest.raises(ValueError):
        LsqrSolver(initial_solution=[1.0]).solve(2, _chain(), [0.0, 3.0])
    with pytest.raises(ValueError):
        LsqrSolver(atol=-1.0)


def test_rank_deficient_system_returns_a_finite_solution() -> None:
    # x0 and x1 only fixed relative to each other, x2 appears in no row
    equations = [
        Equation(point=0, columns=(0, 1), coefficients=(1.0, -1.0), kind="neighbor"),
        Equation(point=1, columns=(0, 1), coefficients=(-1.0, 1.0), kind="neighbor"),
    ]
    solution, report = LsqrSolver().solve_with_report(3, equations, [0.0, 0.0])
    assert solution.shape == (3,)
    assert np.all(np.isfinite(solution))
    assert solution[0] == pytest.approx(solution[1])
    assert report.max_iterations == default_max_iterations(3, 2)
    assert np.isfinite(report.residual_norm)


def test_inconsistent_rows_give_the_least_squares_compromise() -> None:
    equations = [
        Equation(point=0, columns=(0, 1), coefficients=(1.0, -1.0), kind="neighbor"),
        Equation(point=1, columns=(0, 1), coefficients=(-1.0, 1.0), kind="neighbor"),
    ]
    solution = LsqrSolver().solve(3, equations, [1.0, 1.0])
    assert np.all(np.isfinite(solution))
    assert solution[2] == 0.0
