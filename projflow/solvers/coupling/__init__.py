"""Coupling agents."""

from .base import CouplingAgent, coupling_registry, make_coupling, register_coupling
from .predictor_corrector import AdvanceResult, PredictorCorrector

__all__ = [
    "AdvanceResult",
    "CouplingAgent",
    "PredictorCorrector",
    "coupling_registry",
    "register_coupling",
    "make_coupling",
]
