"""Outlet boundary conditions."""

from __future__ import annotations

from .base import BoundaryCondition, boundary_registry


@boundary_registry.register("pressureOutflow", "pout")
class PressureOutflow(BoundaryCondition):
    code = "pout"
    pressure_dirichlet = True

    def __init__(self, face, mesh, pressure: float = 0.0, **kwargs):
        super().__init__(face, mesh, pressure=pressure, **kwargs)
