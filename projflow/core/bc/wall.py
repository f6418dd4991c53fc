"""Wall boundary conditions."""

from __future__ import annotations

from .base import BoundaryCondition, boundary_registry


@boundary_registry.register("noSlipWall", "nsw")
class NoSlipWall(BoundaryCondition):
    code = "nsw"
    velocity_dirichlet = True


@boundary_registry.register("movingWall")
class MovingWall(NoSlipWall):
    """No-slip wall translating with ``velocity`` (lid-driven cavities)."""

    def __init__(self, face, mesh, velocity, **kwargs):
        super().__init__(face, mesh, velocity=velocity, **kwargs)
