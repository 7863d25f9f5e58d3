from __future__ import annotations

import random

import numpy as np
import pytest

from semspace.landmarks import SimilarityDistance, StressMajorizationLayout
from semspace.similarity import SimilarityMatrixBuilder
from semspace.vectors import SparseVector


def test_single_landmark_sits_at_origin() -> None:
    positions = StressMajorizationLayout().embed(1, lambda a, b: 1.0, random.Random(1))
    assert positions.shape == (1, 2)
    assert np.all(positions == 0.0)


def test_two_landmarks_end_up_at_their_target_distance() -> None:
    positions = StressMajorizationLayout().embed(2, lambda a, b: 1.0, random.Random(1))
    assert positions.shape == (2, 2)
    assert np.linalg.norm(positions[0] - positions[1]) == pytest.approx(1.0, abs=1e-6)


def test_layout_lowers_stress_against_random_start() -> None:
    target_fn = lambda a, b: abs(a - b) / 3.0
    layout = StressMajorizationLayout(max_iterations=500)
    positions = layout.embed(4, target_fn, random.Random(4))
    target = StressMajorizationLayout.target_distances(4, target_fn)
    rng = random.Random(4)
    start = np.array([[rng.random(), rng.random()] for _ in range(4)])
    assert layout.stress(positions, target) < layout.stress(start, target)
    assert np.all(np.isfinite(positions))


def test_same_seed_gives_same_positions() -> None:
    distance = lambda a, b: 0.5 if (a + b) % 2 else 1.0
    first = StressMajorizationLayout().embed(5, distance, random.Random(9))
    second = StressMajorizationLayout().embed(5, distance, random.Random(9))
    assert np.array_equal(first, second)


def test_similarity_distance_reads_the_upper_triangle() -> None:
    a = SparseVector([0], [1.0])
    b = SparseVector([3], [1.0])
    sims = SimilarityMatrixBuilder(0.0).build([a, a, b], full=False)
    distance = SimilarityDistance(sims)
    assert distance(0, 0) == 0.0
    assert distance(0, 1) == pytest.approx(0.0)
    assert distance(1, 0) == pytest.approx(0.0)
    # pairs below the threshold are missing and count as unrelated
    assert distance(0, 2) == 1.0
    assert SimilarityDistance(sims, default_similarity=0.5)(2, 1) == 0.5


def test_bad_distances_and_options_are_rejected() -> None:
    with pytest.raises(ValueError):
        StressMajorizationLayout().embed(0, lambda a, b: 1.0, random.Random(1))
    with pytest.raises(ValueError):
        StressMajorizationLayout().embed(3, lambda a, b: -1.0, random.Random(1))
    with pytest.raises(ValueError):
        StressMajorizationLayout(eps=-1.0)
    with pytest.raises(ValueError):
        StressMajorizationLayout(max_iterations=0)
