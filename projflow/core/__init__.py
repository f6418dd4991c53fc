"""Core structured-grid data structures."""

from .field import FieldStore, OldStateSnapshot, ScalarField, VectorField
from .linalg import SolverError
from .mesh import Box, Mesh

__all__ = [
    "Box",
    "FieldStore",
    "Mesh",
    "OldStateSnapshot",
    "ScalarField",
    "SolverError",
    "VectorField",
]
