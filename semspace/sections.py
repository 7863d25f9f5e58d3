from __future__ import annotations

CLUSTERING = "clustering"
LANDMARK_LAYOUT = "landmark_layout"
SIMILARITY = "similarity"
EQUATIONS = "equations"
SOLVE = "solve"
LAYOUT = "layout"
SETTINGS = "settings"
SPARSE_VECTORS = "sparse_vectors"
