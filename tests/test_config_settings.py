from __future__ import annotations

import json

import numpy as np
import pytest

from semspace.layout import LayoutConfig, LayoutContext, LayoutSettings, load_config


def test_defaults() -> None:
    config = LayoutConfig()
    assert config.k == 100
    assert config.kmeans_eps == 0.01
    assert config.similarity_threshold == 0.005
    assert config.neighborhood_size == 10
    assert config.seed == 1
    assert config.landmark_threshold == 0.005
    assert LayoutConfig(landmark_similarity_threshold=0.2).landmark_threshold == 0.2


@pytest.mark.parametrize(
    "overrides",
    [
        {"k": 1},
        {"kmeans_eps": -0.1},
        {"kmeans_trials": 0},
        {"kmeans_init": "farthest"},
        {"similarity_threshold": -1.0},
        {"landmark_similarity_threshold": -1.0},
        {"neighborhood_size": 0},
        {"similarity": "jaccard"},
        {"stress_max_iterations": 0},
        {"solver_max_iterations": 0},
        {"block_size": 0},
    ],
)
def test_invalid_values_are_rejected(overrides) -> None:
    with pytest.raises(ValueError):
        LayoutConfig(**overrides)


def test_from_mapping_rejects_unknown_keys() -> None:
    config = LayoutConfig.from_mapping({"k": 4, "seed": 9})
    assert (config.k, config.seed) == (4, 9)
    assert config.as_dict()["k"] == 4
    with pytest.raises(ValueError, match="neighbours"):
        LayoutConfig.from_mapping({"neighbours": 3})


def test_load_config_reads_json(tmp_path) -> None:
    path = tmp_path / "layout.json"
    path.write_text(json.dumps({"k": 3, "similarity": "dot"}), encoding="utf-8")
    config = load_config(str(path))
    assert config.k == 3
    assert config.similarity == "dot"
    path.write_text("[1, 2]", encoding="utf-8")
    with pytest.raises(ValueError):
        load_config(str(path))


def test_context_reset_replays_the_sequence() -> None:
    context = LayoutContext(5)
    first = [context.rng.random() for _ in range(3)]
    context.reset()
    assert [context.rng.random() for _ in range(3)] == first
    state = context.snapshot()
    value = context.rng.random()
    context.restore(state)
    assert context.rng.random() == value


def test_adjust_layout_fits_and_centers() -> None:
    settings = LayoutSettings(width=10.0, height=4.0, margin=1.0)
    adjusted = settings.adjust_layout([[0.0, 0.0], [2.0, 1.0], [4.0, 0.5]])
    # x span drives the scale: 8 / 4
    assert np.allclose(adjusted, [[1.0, 1.0], [5.0, 3.0], [9.0, 2.0]])


def test_adjust_layout_collapses_a_single_location() -> None:
    settings = LayoutSettings(width=6.0, height=2.0)
    adjusted = settings.adjust_layout(np.ones((3, 2)))
    assert np.allclose(adjusted, [[3.0, 1.0]] * 3)
    assert settings.adjust_layout([]).shape == (0, 2)


def test_settings_validation() -> None:
    with pytest.raises(ValueError):
        LayoutSettings(width=0.0)
    with pytest.raises(ValueError):
        LayoutSettings(margin=-1.0)
    with pytest.raises(ValueError):
        LayoutSettings(width=2.0, height=2.0, margin=1.0)
