from __future__ import annotations

import numpy as np
import pytest

from semspace.equations import Equation, NeighborhoodEquationBuilder
from semspace.equations.builder import equations_to_csr
from semspace.similarity import SimilarityMatrixBuilder
from semspace.vectors import SparseVector


@pytest.fixture
def system(identical_groups):
    a, b = identical_groups[0], identical_groups[3]
    dataset = identical_groups + [SparseVector()] + [a, b]
    sims = SimilarityMatrixBuilder(0.005).build(dataset)
    return NeighborhoodEquationBuilder(10).build(sims, num_points=6, num_landmarks=2)


def test_neighbor_rows_average_their_neighbors(system) -> None:
    neighbor_rows = [eq for eq in system.equations if eq.kind == "neighbor"]
    assert [eq.point for eq in neighbor_rows] == [0, 1, 2, 3, 4]
    for eq in neighbor_rows:
        assert eq.self_coefficient == 1.0
        assert eq.neighbor_weight_sum == -1.0
        assert list(eq.columns) == sorted(eq.columns)
    assert system.equations[0].neighbor_columns == (1, 2, 6)
    assert system.equations[3].neighbor_columns == (4, 7)
    assert system.equations[3].neighbor_coefficients == (-0.5, -0.5)


def test_point_without_neighbors_is_pinned_to_zero(system) -> None:
    eq = system.equations[5]
    assert eq.kind == "isolated"
    assert eq.columns == (5,)
    assert eq.coefficients == (1.0,)
    assert system.isolated == (5,)


def test_anchor_rows_come_last_and_carry_landmark_coordinates(system) -> None:
    assert len(system) == 6 + 2
    assert system.num_unknowns == 8
    assert system.anchor_rows == (6, 7)
    anchors = [system.equations[row] for row in system.anchor_rows]
    assert [(eq.point, eq.landmark) for eq in anchors] == [(6, 0), (7, 1)]
    rhs = system.rhs([2.5, -1.0])
    assert rhs.tolist() == [0.0] * 6 + [2.5, -1.0]
    with pytest.raises(ValueError):
        system.rhs([1.0])


def test_neighborhood_keeps_only_the_most_similar() -> None:
    builder = NeighborhoodEquationBuilder(2)
    eq = builder.neighbor_equation(0, [(4, 0.9), (2, 0.8), (1, 0.1)])
    assert eq.neighbor_columns == (2, 4)
    assert eq.neighbor_coefficients == (-0.5, -0.5)
    assert eq.columns == (0, 2, 4)


def test_landmark_neighbor_rows_are_optional(identical_groups) -> None:
    a, b = identical_groups[0], identical_groups[3]
    sims = SimilarityMatrixBuilder(0.005).build(identical_groups + [a, b])
    system = NeighborhoodEquationBuilder(
        10, landmark_neighbor_equations=True
    ).build(sims, num_points=5, num_landmarks=2)
    assert len(system) == 5 + 2 + 2
    landmark_rows = [eq for eq in system.equations[5:7]]
    assert [eq.point for eq in landmark_rows] == [5, 6]
    assert all(eq.kind == "neighbor" for eq in landmark_rows)


def test_equations_to_csr_matches_rows(system) -> None:
    matrix = equations_to_csr(system.num_unknowns, system.equations).toarray()
    assert matrix.shape == (8, 8)
    assert np.allclose(matrix.sum(axis=1)[:5], 0.0)
    assert matrix[5].tolist() == [0, 0, 0, 0, 0, 1, 0, 0]
    assert matrix[6, 6] == 1.0 and matrix[7, 7] == 1.0


def test_invalid_equations_and_builder_inputs(system) -> None:
    with pytest.raises(ValueError):
        Equation(point=0, columns=(1, 0), coefficients=(1.0, -1.0), kind="neighbor")
    with pytest.raises(ValueError):
        Equation(point=3, columns=(0, 1), coefficients=(1.0, -1.0), kind="neighbor")
    with pytest.raises(ValueError):
        Equation(point=0, columns=(0,), coefficients=(1.0,), kind="anchor")
    with pytest.raises(ValueError):
        Equation(point=0, columns=(0,), coefficients=(1.0,), kind="pinned")
    with pytest.raises(ValueError):
        NeighborhoodEquationBuilder(0)
    sims = SimilarityMatrixBuilder(0.005).build([SparseVector([0], [1.0])] * 3)
    with pytest.raises(ValueError):
        NeighborhoodEquationBuilder().build(sims, num_points=3, num_landmarks=1)


@pytest.mark.parametrize("neighborhood_size", [1, 3, 6, 10, 49, 59, 100])
def test_neighbor_weights_sum_to_exactly_minus_one(neighborhood_size) -> None:
    builder = NeighborhoodEquationBuilder(neighborhood_size)
    neighbors = [(col, 1.0 - col / 200.0) for col in range(1, neighborhood_size + 1)]
    eq = builder.neighbor_equation(0, neighbors)
    assert len(eq.neighbor_columns) == neighborhood_size
    assert eq.neighbor_weight_sum == -1.0
    for coefficient in eq.neighbor_coefficients:
        assert coefficient == pytest.approx(-1.0 / neighborhood_size, rel=1e-12)
