"""Boundary condition base class for one domain face."""

from __future__ import annotations

from typing import Optional, Sequence

import numpy as np

from ...utils.registry import Registry
from ..mesh import FACES, Mesh

boundary_registry = Registry("boundary type")


class BoundaryCondition:
    """Per-face boundary data: type code plus the face values it prescribes.

    ``density`` and ``tracer`` are the scalar table entries used by
    ``BoundaryTable.set_scalar_bcs`` on inflow and wall faces.
    """

    code = "undefined"
    velocity_dirichlet = False
    pressure_dirichlet = False

    def __init__(
        self,
        face: str,
        mesh: Mesh,
        velocity: Optional[Sequence[float]] = None,
        pressure: float = 0.0,
        density: Optional[float] = None,
        tracer: float = 0.0,
    ) -> None:
        if face not in FACES:
            raise ValueError(f"Unknown face '{face}', expected one of {sorted(FACES)}")
        axis, _ = FACES[face]
        if mesh.periodic[axis]:
            raise ValueError(f"Face {face} is periodic and cannot carry a boundary condition")
        self.face = face
        self.mesh = mesh
        self.velocity = np.zeros(3) if velocity is None else np.asarray(velocity, dtype=float)
        if self.velocity.shape != (3,):
            raise ValueError(f"Face {face} velocity must have three components")
        self.pressure = float(pressure)
        self.density = None if density is None else float(density)
        self.tracer = float(tracer)

    def fill_velocity(self, values: np.ndarray) -> None:
        if self.velocity_dirichlet:
            self._reflect(values, self.velocity)
        else:
            self.extrapolate(values)

    def fill_pressure(self, values: np.ndarray, homogeneous: bool = False) -> None:
        if self.pressure_dirichlet:
            self._reflect(values, 0.0 if homogeneous else self.pressure)
        else:
            self.extrapolate(values)

    def fill_scalar(self, values: np.ndarray, value: Optional[float]) -> None:
        """Pressure faces extrapolate; inflow and wall faces take the table value."""

        if self.pressure_dirichlet or value is None:
            self.extrapolate(values)
            return
        for ghost, _ in self.mesh.ghost_layers(self.face):
            values[ghost] = value

    def _reflect(self, values: np.ndarray, face_value) -> None:
        for ghost, mirror in self.mesh.ghost_layers(self.face):
            values[ghost] = 2.0 * np.asarray(face_value) - values[mirror]

    def extrapolate(self, values: np.ndarray) -> None:
        for ghost, mirror in self.mesh.ghost_layers(self.face):
            values[ghost] = values[mirror]

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.face!r})"
