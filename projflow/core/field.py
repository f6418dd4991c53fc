"""Halo-padded cell fields and the per-level field store."""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator, Optional, Tuple

import numpy as np

from .mesh import Mesh


class Field:
    """Base class for cell-centred fields stored with ghost cells."""

    ncomp = 1

    def __init__(self, name: str, mesh: Mesh, values=None) -> None:
        self.name = name
        self.mesh = mesh
        self.values = mesh.allocate(self.ncomp)
        if values is not None:
            self.set_interior(values)

    def _check_shape(self, arr: np.ndarray) -> None:
        expected = self.values.shape
        if arr.shape != expected:
            raise ValueError(f"Field {self.name} expects shape {expected}, got {arr.shape}")

    @property
    def interior(self) -> np.ndarray:
        return self.values[self.mesh.interior]

    @interior.setter
    def interior(self, values) -> None:
        self.set_interior(values)

    def set_interior(self, values) -> None:
        arr = np.asarray(values, dtype=float)
        view = self.values[self.mesh.interior]
        try:
            view[...] = arr
        except ValueError as exc:
            raise ValueError(
                f"Field {self.name} cannot take values of shape {arr.shape} "
                f"on a valid region of shape {view.shape}"
            ) from exc

    def copy_from(self, other: "Field") -> None:
        self._check_shape(other.values)
        np.copyto(self.values, other.values)

    def fill(self, value) -> None:
        self.values[...] = value

    def norm0(self, comp: Optional[int] = None) -> float:
        return self.mesh.norm0(self.values, comp)

    def norm1(self, comp: Optional[int] = None) -> float:
        return self.mesh.norm1(self.values, comp)

    def contains_nan(self, comp: Optional[int] = None) -> bool:
        view = self.interior if comp is None else self.interior[..., comp]
        return not bool(np.isfinite(view).all())


class ScalarField(Field):
    """Scalar field at cell centres."""

    ncomp = 1


class VectorField(Field):
    """Three components per cell, component index last."""

    ncomp = 3

    def saxpy(self, a: float, other: "VectorField") -> None:
        """``self += a * other`` over the valid region."""

        self.values[self.mesh.interior] += a * other.interior

    def multiply(self, density: ScalarField) -> None:
        """Velocity to momentum, componentwise over the valid region."""

        self.values[self.mesh.interior] *= density.interior[..., None]

    def divide(self, density: ScalarField) -> None:
        """Momentum back to velocity; density must be strictly positive."""

        require_positive(density)
        self.values[self.mesh.interior] /= density.interior[..., None]


def require_positive(density: ScalarField) -> None:
    rho = density.interior
    if not np.all(rho > 0.0):
        bad = int(np.count_nonzero(~(rho > 0.0)))
        raise ValueError(
            f"{density.name} must be strictly positive for the momentum round trip "
            f"({bad} cells violate it, min = {np.nanmin(rho):.3e})"
        )


@dataclass
class OldStateSnapshot:
    """By-value copy of the state at the start of an outer-loop iteration."""

    velocity: VectorField
    pressure: ScalarField
    density: ScalarField
    taken: bool = False


class FieldStore:
    """Mutable state of one level plus its previous-iteration snapshot."""

    def __init__(self, mesh: Mesh, with_tracer: bool = False) -> None:
        self.mesh = mesh
        self.velocity = VectorField("U", mesh)
        self.pressure = ScalarField("p", mesh)
        self.density = ScalarField("rho", mesh, 1.0)
        self.viscosity = ScalarField("mu", mesh)
        self.pressure_gradient = VectorField("gradp", mesh)
        self.base_pressure_gradient = VectorField("gradp0", mesh)
        self.tracer = ScalarField("tracer", mesh) if with_tracer else None
        self.old = OldStateSnapshot(
            velocity=VectorField("U_old", mesh),
            pressure=ScalarField("p_old", mesh),
            density=ScalarField("rho_old", mesh, 1.0),
        )
        self.live_temporaries = 0

    def snapshot(self) -> OldStateSnapshot:
        """Overwrite the old-state fields with the current state."""

        self.old.velocity.copy_from(self.velocity)
        self.old.pressure.copy_from(self.pressure)
        self.old.density.copy_from(self.density)
        self.old.taken = True
        return self.old

    def require_snapshot(self) -> OldStateSnapshot:
        if not self.old.taken:
            raise RuntimeError("No old-state snapshot taken for this iteration")
        return self.old

    @contextmanager
    def temporaries(self, *names: str) -> Iterator[Tuple[VectorField, ...]]:
        """Fresh zeroed 3-component fields, released when the block exits."""

        fields = tuple(VectorField(name, self.mesh) for name in names)
        self.live_temporaries += len(fields)
        try:
            yield fields
        finally:
            self.live_temporaries -= len(fields)
            for tmp in fields:
                tmp.values = None

    def max_abs(self) -> dict:
        vel = self.velocity
        return {
            "u": vel.norm0(0),
            "v": vel.norm0(1),
            "w": vel.norm0(2),
            "p": self.pressure.norm0(),
        }
