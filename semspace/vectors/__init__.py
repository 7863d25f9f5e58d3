from .sparse_vector import SparseVector, dataset_dimension, dataset_to_csr

__all__ = [
    "SparseVector",
    "dataset_dimension",
    "dataset_to_csr",
]
