from .matrix import (
    SIMILARITY_MODES,
    SimilarityEntry,
    SimilarityMatrix,
    SimilarityMatrixBuilder,
    cosine_similarity,
    dot_product_similarity,
)

__all__ = [
    "SIMILARITY_MODES",
    "SimilarityEntry",
    "SimilarityMatrix",
    "SimilarityMatrixBuilder",
    "cosine_similarity",
    "dot_product_similarity",
]
