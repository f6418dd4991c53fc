"""Discretisation schemes and explicit operators."""

from .operators import ExplicitOperators
from .schemes import CentralScheme, Scheme, UpwindScheme, make_scheme, scheme_registry
from .stability import compute_new_dt

__all__ = [
    "CentralScheme",
    "ExplicitOperators",
    "Scheme",
    "UpwindScheme",
    "compute_new_dt",
    "make_scheme",
    "scheme_registry",
]
