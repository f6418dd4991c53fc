"""Boundary condition implementations."""

from .base import BoundaryCondition, boundary_registry
from .inlet import MassInflow, PressureInflow
from .outlet import PressureOutflow
from .table import BoundaryTable
from .wall import MovingWall, NoSlipWall

__all__ = [
    "BoundaryCondition",
    "BoundaryTable",
    "MassInflow",
    "PressureInflow",
    "PressureOutflow",
    "NoSlipWall",
    "MovingWall",
    "boundary_registry",
]
