"""Read-only table of face boundary conditions for one level."""

from __future__ import annotations

from typing import Callable, Dict, Mapping, Optional

import numpy as np

from ..field import Field, ScalarField, VectorField
from ..mesh import FACES, Mesh
from .base import BoundaryCondition, boundary_registry
from .inlet import MassInflow
from .outlet import PressureOutflow  # noqa: F401
from .wall import MovingWall

# Scalar component -> table entry. Density and tracer each own a table.
SCALAR_TABLES = {0: "density", 1: "tracer"}


class BoundaryTable:
    """Face-keyed boundary data passed explicitly to every consumer.

    Ghost cells are filled one direction at a time, periodic directions by
    halo exchange, so edge and corner ghosts see already-filled neighbours.
    """

    def __init__(self, mesh: Mesh, conditions: Mapping[str, BoundaryCondition]) -> None:
        expected = set(mesh.boundary_faces())
        given = set(conditions)
        missing = expected - given
        if missing:
            raise ValueError(f"No boundary condition for non-periodic faces {sorted(missing)}")
        extra = given - expected
        if extra:
            raise ValueError(f"Boundary conditions given for periodic faces {sorted(extra)}")
        self.mesh = mesh
        self._conditions: Dict[str, BoundaryCondition] = dict(conditions)

    @classmethod
    def from_dict(cls, mesh: Mesh, data: Optional[Mapping], density: float = 1.0) -> "BoundaryTable":
        conditions = {}
        for face, cfg in (data or {}).items():
            info = cfg or {}
            if isinstance(info, str):
                info = {"type": info}
            bc_type = str(info.get("type", "noSlipWall"))
            try:
                cls_ = boundary_registry.get(bc_type)
            except KeyError as exc:
                raise ValueError(f"Unknown boundary type '{bc_type}' on face {face}") from exc
            kwargs = {
                "density": float(info.get("density", density)),
                "tracer": float(info.get("tracer", 0.0)),
            }
            if "velocity" in info or cls_ in (MassInflow, MovingWall):
                kwargs["velocity"] = info.get("velocity", [0.0, 0.0, 0.0])
            if "pressure" in info:
                kwargs["pressure"] = float(info["pressure"])
            conditions[face] = cls_(face, mesh, **kwargs)
        return cls(mesh, conditions)

    def __getitem__(self, face: str) -> BoundaryCondition:
        return self._conditions[face]

    def _sweep(self, values: np.ndarray, fill: Callable[[BoundaryCondition, np.ndarray], None]) -> None:
        for axis in range(3):
            if self.mesh.periodic[axis]:
                self.mesh.fill_periodic(values, axis)
                continue
            for face, (face_axis, _) in FACES.items():
                if face_axis == axis:
                    fill(self._conditions[face], values)

    def set_velocity_bcs(self, velocity: VectorField) -> None:
        self._sweep(velocity.values, lambda bc, arr: bc.fill_velocity(arr))

    def set_pressure_bcs(self, pressure: ScalarField, homogeneous: bool = False) -> None:
        self._sweep(pressure.values, lambda bc, arr: bc.fill_pressure(arr, homogeneous))

    def set_scalar_bcs(self, field: ScalarField, comp: int = 0) -> None:
        try:
            entry = SCALAR_TABLES[comp]
        except KeyError as exc:
            raise ValueError(f"No scalar boundary table for component {comp}") from exc
        self._sweep(field.values, lambda bc, arr: bc.fill_scalar(arr, getattr(bc, entry)))

    def extrapolate(self, field: Field) -> None:
        self._sweep(field.values, lambda bc, arr: bc.extrapolate(arr))

    def pressure_dirichlet(self, homogeneous: bool = False) -> Dict[str, float]:
        return {
            face: 0.0 if homogeneous else bc.pressure
            for face, bc in self._conditions.items()
            if bc.pressure_dirichlet
        }

    def velocity_dirichlet(self, comp: int) -> Dict[str, float]:
        return {
            face: float(bc.velocity[comp])
            for face, bc in self._conditions.items()
            if bc.velocity_dirichlet
        }

    @property
    def has_pressure_dirichlet(self) -> bool:
        return any(bc.pressure_dirichlet for bc in self._conditions.values())
