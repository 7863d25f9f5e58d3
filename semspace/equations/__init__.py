from .builder import (
    EQUATION_KINDS,
    Equation,
    EquationSystem,
    NeighborhoodEquationBuilder,
    equations_to_csr,
)

__all__ = [
    "EQUATION_KINDS",
    "Equation",
    "EquationSystem",
    "NeighborhoodEquationBuilder",
    "equations_to_csr",
]
