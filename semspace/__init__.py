from .equations import Equation, EquationSystem, NeighborhoodEquationBuilder
from .landmarks import (
    KMeansLandmarkSelector,
    Landmark,
    LandmarkLayoutEngine,
    LandmarkSelector,
    SimilarityDistance,
    StressMajorizationLayout,
)
from .layout import (
    CancellationToken,
    LayoutCancelled,
    LayoutConfig,
    LayoutContext,
    LayoutResult,
    LayoutSettings,
    LayoutStage,
    SemanticSpaceLayout,
    load_config,
    load_vectors,
    save_layout,
)
from .logging import LOGGER, SemspaceLogger
from .similarity import SimilarityEntry, SimilarityMatrix, SimilarityMatrixBuilder
from .solvers import LinearSystemSolver, LsqrSolver, SolveReport
from .vectors import SparseVector

__all__ = [
    "CancellationToken",
    "Equation",
    "EquationSystem",
    "KMeansLandmarkSelector",
    "LOGGER",
    "Landmark",
    "LandmarkLayoutEngine",
    "LandmarkSelector",
    "LayoutCancelled",
    "LayoutConfig",
    "LayoutContext",
    "LayoutResult",
    "LayoutSettings",
    "LayoutStage",
    "LinearSystemSolver",
    "LsqrSolver",
    "NeighborhoodEquationBuilder",
    "SemanticSpaceLayout",
    "SemspaceLogger",
    "SimilarityDistance",
    "SimilarityEntry",
    "SimilarityMatrix",
    "SimilarityMatrixBuilder",
    "SolveReport",
    "SparseVector",
    "load_config",
    "load_vectors",
    "save_layout",
]
