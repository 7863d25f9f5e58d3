from .config import LayoutConfig, load_config
from .context import CancellationToken, LayoutCancelled, LayoutContext
from .payload import LabeledVector, layout_payload, load_vectors, save_layout
from .semantic_space_layout import LayoutResult, LayoutStage, SemanticSpaceLayout
from .settings import LayoutSettings
from .visualize_layout import log_layout, visualize_layout

__all__ = [
    "CancellationToken",
    "LabeledVector",
    "LayoutCancelled",
    "LayoutConfig",
    "LayoutContext",
    "LayoutResult",
    "LayoutSettings",
    "LayoutStage",
    "SemanticSpaceLayout",
    "layout_payload",
    "load_config",
    "load_vectors",
    "log_layout",
    "save_layout",
    "visualize_layout",
]
