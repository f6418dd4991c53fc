"""Transport properties models."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional

from ..core.field import FieldStore


@dataclass
class ConstantTransport:
    rho: float = 1.0
    mu: float = 1.0e-3

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, float]]) -> "ConstantTransport":
        data = data or {}
        transport = cls(rho=float(data.get("rho", 1.0)), mu=float(data.get("mu", 1.0e-3)))
        if transport.rho <= 0.0:
            raise ValueError(f"Density must be positive, got {transport.rho}")
        if transport.mu < 0.0:
            raise ValueError(f"Viscosity must be non-negative, got {transport.mu}")
        return transport

    def update(self, _time: float) -> None:
        return

    def density(self) -> float:
        return self.rho

    def apply(self, store: FieldStore) -> None:
        """Set uniform density and viscosity on the valid cells."""

        store.density.set_interior(self.rho)
        store.viscosity.set_interior(self.mu)
