"""Body-force sources added to the velocity update."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Dict, Iterable, List, Mapping, Optional

import numpy as np

from ..core.field import FieldStore
from ..core.mesh import Mesh
from ..utils.registry import Registry


forcing_registry = Registry("forcing")


def register_forcing(name: str):
    return forcing_registry.register(name)


def make_forcing(name: str, mesh: Mesh, config: Optional[Dict] = None):
    return forcing_registry.create(name, mesh, config or {})


class ForcingTerm(ABC):
    """Acceleration source evaluated on the valid cells."""

    def __init__(self, mesh: Mesh, config: Optional[Dict] = None) -> None:
        self.mesh = mesh
        self.config = config or {}

    @abstractmethod
    def acceleration(self, store: FieldStore, time: float) -> np.ndarray:
        """Return an interior-shaped ``(..., 3)`` acceleration array."""

    @property
    def gravity(self) -> np.ndarray:
        return np.zeros(3)


@register_forcing("gravity")
class GravityForcing(ForcingTerm):
    def __init__(self, mesh: Mesh, config: Optional[Dict] = None) -> None:
        super().__init__(mesh, config)
        g = np.asarray(self.config.get("g", [0.0, 0.0, -9.81]), dtype=float)
        if g.shape != (3,):
            raise ValueError("gravity.g must have three components")
        self._g = g

    @property
    def gravity(self) -> np.ndarray:
        return self._g.copy()

    def acceleration(self, store: FieldStore, time: float) -> np.ndarray:
        return np.broadcast_to(self._g, (*self.mesh.shape, 3))


class ForcingTerms:
    """Ordered set of forcing strategies chosen once from the case dictionary."""

    def __init__(self, terms: Iterable[ForcingTerm] = ()) -> None:
        self.terms: List[ForcingTerm] = list(terms)

    @classmethod
    def from_config(cls, mesh: Mesh, config: Optional[Mapping]) -> "ForcingTerms":
        terms = []
        for name, cfg in (config or {}).items():
            terms.append(make_forcing(name, mesh, cfg))
        return cls(terms)

    @property
    def gravity(self) -> np.ndarray:
        total = np.zeros(3)
        for term in self.terms:
            total += term.gravity
        return total

    def apply(self, store: FieldStore, dt: float, time: float) -> None:
        """``vel += dt * sum(f_k)`` on the valid cells."""

        if not self.terms:
            return
        total = np.zeros((*store.mesh.shape, 3))
        for term in self.terms:
            total += term.acceleration(store, time)
        store.velocity.values[store.mesh.interior] += dt * total

    def __len__(self) -> int:
        return len(self.terms)
