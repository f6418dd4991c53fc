"""Variable-density incompressible flow with a predictor-corrector projection scheme."""

from .core import FieldStore, Mesh, ScalarField, SolverError, VectorField
from .run.case import Case
from .solvers.coupling import AdvanceResult, PredictorCorrector

__all__ = [
    "AdvanceResult",
    "Case",
    "FieldStore",
    "Mesh",
    "PredictorCorrector",
    "ScalarField",
    "SolverError",
    "VectorField",
]
