"""Approximate cell-centred projection onto divergence-free velocity."""

from __future__ import annotations

import logging
from typing import Dict

from ..core import fv_ops
from ..core.bc import BoundaryTable
from ..core.field import FieldStore, ScalarField, require_positive
from ..core.linalg import assemble_laplacian
from ..core.mesh import Mesh

logger = logging.getLogger(__name__)


class ProjectionSolver:
    """Solve ``div(grad(phi)/rho) = div(u)/dt`` and remove ``dt grad(phi)/rho``.

    With ``proj_2`` the old pressure gradient is added back first and ``phi``
    is the new pressure; otherwise ``phi`` is an increment added to ``p``.
    """

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
        self._phi = ScalarField("phi", mesh)

    def project(self, store: FieldStore, dt: float, proj_2: bool = True) -> Dict[str, float]:
        mesh = self.mesh
        vel = store.velocity
        rho = store.density
        require_positive(rho)
        self.boundaries.set_scalar_bcs(rho, 0)
        rho_c = rho.interior[..., None]

        if proj_2:
            vel.values[mesh.interior] += dt * store.pressure_gradient.interior / rho_c

        self.boundaries.set_velocity_bcs(vel)
        divu = fv_ops.divergence(mesh, vel.values)

        homogeneous = not proj_2
        face_coeffs = fv_ops.face_coefficients(mesh, 1.0 / rho.values)
        matrix, bc_rhs = assemble_laplacian(
            mesh, face_coeffs, self.boundaries.pressure_dirichlet(homogeneous)
        )
        if not self.boundaries.has_pressure_dirichlet:
            reference = float(store.pressure.interior.flat[0]) if proj_2 else 0.0
            matrix.set_reference(0, reference)

        rhs = -divu.ravel() / dt + bc_rhs
        guess = store.pressure.interior.ravel() if proj_2 else None
        phi, stats = matrix.solve(
            rhs,
            method=self.method,
            tol=self.tol,
            maxiter=self.maxiter,
            return_stats=True,
            initial_guess=guess,
        )

        self._phi.set_interior(phi.reshape(mesh.shape))
        self.boundaries.set_pressure_bcs(self._phi, homogeneous=homogeneous)
        grad_phi = fv_ops.gradient(mesh, self._phi.values)
        vel.values[mesh.interior] -= dt * grad_phi / rho_c

        if proj_2:
            store.pressure.set_interior(self._phi.interior)
            store.pressure_gradient.set_interior(grad_phi)
        else:
            store.pressure.values[mesh.interior] += self._phi.interior
            store.pressure_gradient.values[mesh.interior] += grad_phi

        self.boundaries.set_velocity_bcs(vel)
        self.boundaries.set_pressure_bcs(store.pressure)
        logger.debug(
            "projection %s: %d iterations, residual %.3e",
            self.method,
            int(stats["iterations"]),
            stats["final"],
        )
        return stats
