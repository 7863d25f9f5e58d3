from __future__ import annotations

import pytest

from semspace.logging import LOGGER
from semspace.vectors import SparseVector


@pytest.fixture(autouse=True)
def quiet_logger():
    LOGGER.configure(console=False, use_rerun=False, spawn=False)
    yield
    LOGGER.configure(console=True, use_rerun=True)


@pytest.fixture
def two_groups() -> list[SparseVector]:
    return [
        SparseVector([0, 1, 2], [1.0, 0.9, 0.1]),
        SparseVector([0, 1, 2], [1.0, 1.0, 0.05]),
        SparseVector([0, 1, 2], [0.95, 1.0, 0.1]),
        SparseVector([5, 6], [1.0, 0.5]),
        SparseVector([5, 6], [1.0, 0.45]),
    ]


@pytest.fixture
def identical_groups() -> list[SparseVector]:
    a = SparseVector([0, 1], [0.6, 0.8])
    b = SparseVector([4, 7], [0.8, 0.6])
    return [a, a, a, b, b]
