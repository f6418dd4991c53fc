"""Explicit convective and viscous operators for the velocity update."""

from __future__ import annotations

from ..core import fv_ops
from ..core.bc import BoundaryTable
from ..core.field import FieldStore, VectorField
from .schemes import Scheme, make_scheme


class ExplicitOperators:
    """Evaluate ``conv = -(u.grad)u`` and ``divtau = div(tau)/rho``.

    With implicit diffusion only the transpose part of the stress is explicit;
    the ``div(mu grad u)`` part is left to the diffusion solve.
    """

    def __init__(
        self,
        boundaries: BoundaryTable,
        scheme: str | Scheme = "central",
        explicit_diffusion: bool = True,
    ) -> None:
        self.boundaries = boundaries
        self.scheme = make_scheme(scheme) if isinstance(scheme, str) else scheme
        self.explicit_diffusion = bool(explicit_diffusion)

    def evaluate(
        self,
        velocity: VectorField,
        store: FieldStore,
        conv: VectorField,
        divtau: VectorField,
    ) -> None:
        """Overwrite ``conv`` and ``divtau``; ``velocity`` ghost cells are refilled."""

        mesh = store.mesh
        self.boundaries.set_velocity_bcs(velocity)
        self.boundaries.extrapolate(store.viscosity)
        self.boundaries.set_scalar_bcs(store.density, 0)

        conv.set_interior(self.scheme.advect(mesh, velocity.values))

        mu = store.viscosity.values
        stress = fv_ops.transpose_stress_divergence(mesh, velocity.values, mu)
        if self.explicit_diffusion:
            for comp in range(3):
                stress[..., comp] += fv_ops.laplacian(mesh, velocity.values[..., comp], mu)
        rho = store.density.interior
        divtau.set_interior(stress / rho[..., None])
