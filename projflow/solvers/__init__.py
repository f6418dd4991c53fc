"""Projection, diffusion and time-integration solvers."""

from .coupling import AdvanceResult, PredictorCorrector, make_coupling
from .diagnostics import check_for_nans, compute_divu, print_max_vel
from .diffusion import DiffusionSolver
from .projection import ProjectionSolver
from .steady import SteadyStateMonitor
from .stepsize import StepSizeController

__all__ = [
    "AdvanceResult",
    "DiffusionSolver",
    "PredictorCorrector",
    "ProjectionSolver",
    "SteadyStateMonitor",
    "StepSizeController",
    "check_for_nans",
    "compute_divu",
    "make_coupling",
    "print_max_vel",
]
