"""Inlet boundary conditions."""

from __future__ import annotations

from .base import BoundaryCondition, boundary_registry


@boundary_registry.register("massInflow", "minf")
class MassInflow(BoundaryCondition):
    code = "minf"
    velocity_dirichlet = True

    def __init__(self, face, mesh, velocity, **kwargs):
        super().__init__(face, mesh, velocity=velocity, **kwargs)


@boundary_registry.register("pressureInflow", "pinf")
class PressureInflow(BoundaryCondition):
    code = "pinf"
    pressure_dirichlet = True
