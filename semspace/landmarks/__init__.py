from .kmeans import KMeansLandmarkSelector, Landmark, LandmarkSelector
from .stress import (
    DistanceFn,
    LandmarkLayoutEngine,
    SimilarityDistance,
    StressMajorizationLayout,
)

__all__ = [
    "DistanceFn",
    "KMeansLandmarkSelector",
    "Landmark",
    "LandmarkLayoutEngine",
    "LandmarkSelector",
    "SimilarityDistance",
    "StressMajorizationLayout",
]
