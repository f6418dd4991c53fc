"""Physics models."""

from .actuator import UniformCtDisk
from .forcing import (
    ForcingTerm,
    ForcingTerms,
    GravityForcing,
    forcing_registry,
    make_forcing,
    register_forcing,
)
from .transport import ConstantTransport

__all__ = [
    "ConstantTransport",
    "ForcingTerm",
    "ForcingTerms",
    "GravityForcing",
    "UniformCtDisk",
    "forcing_registry",
    "make_forcing",
    "register_forcing",
]
