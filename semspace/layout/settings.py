from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

import numpy as np

from semspace.logging import LOGGER
from semspace.sections import SETTINGS


@dataclass(frozen=True)
class LayoutSettings:
    """Uniformly scales a finished layout into a centered bounding area."""

    width: float = 1.0
    height: float = 1.0
    margin: float = 0.0

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise ValueError("width and height must be positive")
        if self.margin < 0:
            raise ValueError("margin must be >= 0")
        if 2 * self.margin >= min(self.width, self.height):
            raise ValueError("margin must leave a non-empty drawing area")

    def adjust_layout(self, positions: Sequence[Sequence[float]] | np.ndarray) -> np.ndarray:
        points = np.array(positions, dtype=np.float64).reshape(-1, 2)
        if len(points) == 0:
            return points
        lo = points.min(axis=0)
        hi = points.max(axis=0)
        span = hi - lo
        inner = np.array([self.width, self.height]) - 2 * self.margin
        scales = [inner[axis] / span[axis] for axis in (0, 1) if span[axis] > 0]
        # a single location collapses to the center
        scale = min(scales) if scales else 0.0
        center = np.array([self.width, self.height]) / 2.0
        adjusted = (points - (lo + hi) / 2.0) * scale + center
        LOGGER.event(
            "settings.adjust",
            section=SETTINGS,
            data={
                "points": len(points),
                "width": self.width,
                "height": self.height,
                "margin": self.margin,
                "scale": scale,
            },
        )
        return adjusted
