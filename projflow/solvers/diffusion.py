"""Backward-Euler viscous solve for the implicit-diffusion path."""

from __future__ import annotations

from typing import Dict

from ..core import fv_ops
from ..core.bc import BoundaryTable
from ..core.field import FieldStore, require_positive
from ..core.linalg import assemble_laplacian, cell_ids
from ..core.mesh import Mesh


class DiffusionSolver:
    """Per component, solve ``(rho/dt) u - div(mu grad u) = (rho/dt) u*``."""

    def __init__(
        self,
        mesh: Mesh,
        boundaries: BoundaryTable,
        method: str = "cg",
        tol: float = 1e-10,
        maxiter: int = 1000,
    ) -> None:
        self.mesh = mesh
        self.boundaries = boundaries
        self.method = method
        self.tol = float(tol)
        self.maxiter = int(maxiter)

    def diffuse(self, store: FieldStore, dt: float) -> Dict[str, float]:
        mesh = self.mesh
        require_positive(store.density)
        self.boundaries.extrapolate(store.viscosity)
        face_coeffs = fv_ops.face_coefficients(mesh, store.viscosity.values)
        rho_dt = store.density.interior / dt
        ids = cell_ids(mesh)

        worst = {"initial": 0.0, "final": 0.0, "relative": 0.0, "iterations": 0.0}
        vel = store.velocity
        for comp in range(3):
            matrix, bc_rhs = assemble_laplacian(
                mesh, face_coeffs, self.boundaries.velocity_dirichlet(comp)
            )
            matrix.add_diag(ids, rho_dt)
            current = vel.interior[..., comp]
            rhs = (rho_dt * current).ravel() + bc_rhs
            solution, stats = matrix.solve(
                rhs,
                method=self.method,
                tol=self.tol,
                maxiter=self.maxiter,
                return_stats=True,
                initial_guess=current.ravel(),
            )
            vel.values[mesh.interior + (comp,)] = solution.reshape(mesh.shape)
            for key in worst:
                worst[key] = max(worst[key], float(stats[key]))

        self.boundaries.set_velocity_bcs(vel)
        return worst
