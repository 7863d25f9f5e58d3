from .lsqr import LinearSystemSolver, LsqrSolver, SolveReport, default_max_iterations

__all__ = [
    "LinearSystemSolver",
    "LsqrSolver",
    "SolveReport",
    "default_max_iterations",
]
