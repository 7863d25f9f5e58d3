from __future__ import annotations

from typing import TYPE_CHECKING, Sequence

import rerun as rr

from semspace.logging import LOGGER
from semspace.sections import LAYOUT

if TYPE_CHECKING:
    from .semantic_space_layout import LayoutResult

_POINT_COLOR = (80, 140, 220)
_LANDMARK_COLOR = (230, 90, 60)


def log_layout(
    result: "LayoutResult",
    *,
    path: str = "layout",
    labels: Sequence[str] | None = None,
) -> None:
    if labels is not None and len(labels) != len(result):
        raise ValueError("labels must hold one entry per point")
    LOGGER.event(
        "layout.visualize",
        section=LAYOUT,
        data={
            "points": len(result),
            "landmarks": len(result.landmark_positions),
            "isolated": len(result.isolated),
        },
        visuals=[
            LOGGER.visual_points2d(
                f"{path}/points",
                result.positions.tolist(),
                colors=[_POINT_COLOR] * len(result),
                radii=0.01,
                labels=None if labels is None else list(labels),
            ),
            LOGGER.visual_points2d(
                f"{path}/landmarks",
                result.landmark_positions.tolist(),
                colors=[_LANDMARK_COLOR] * len(result.landmark_positions),
                radii=0.02,
            ),
        ],
    )


def visualize_layout(
    result: "LayoutResult",
    *,
    app_id: str = "semspace-layout",
    path: str = "layout",
    labels: Sequence[str] | None = None,
) -> None:
    rr.init(app_id, spawn=True)
    LOGGER.configure(use_rerun=True)
    log_layout(result, path=path, labels=labels)
