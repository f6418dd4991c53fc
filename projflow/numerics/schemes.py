"""Convective-term discretisations."""

from __future__ import annotations

import numpy as np

from ..core import fv_ops
from ..core.mesh import Mesh
from ..utils.registry import Registry


scheme_registry = Registry("convection scheme")


class Scheme:
    name = "generic"

    def advect(self, mesh: Mesh, velocity: np.ndarray) -> np.ndarray:
        """Return ``-(u . grad) u`` on the valid region."""

        raise NotImplementedError


@scheme_registry.register("central")
class CentralScheme(Scheme):
    name = "Central"

    def advect(self, mesh: Mesh, velocity: np.ndarray) -> np.ndarray:
        u = velocity[mesh.region()]
        result = np.zeros_like(u)
        for comp in range(3):
            for axis in range(3):
                result[..., comp] -= u[..., axis] * fv_ops.ddx(mesh, velocity[..., comp], axis)
        return result


@scheme_registry.register("upwind")
class UpwindScheme(Scheme):
    name = "Upwind"

    def advect(self, mesh: Mesh, velocity: np.ndarray) -> np.ndarray:
        u = velocity[mesh.region()]
        result = np.zeros_like(u)
        for axis in range(3):
            positive = u[..., axis] >= 0.0
            for comp in range(3):
                backward = fv_ops.one_sided(mesh, velocity[..., comp], axis, -1)
                forward = fv_ops.one_sided(mesh, velocity[..., comp], axis, 1)
                result[..., comp] -= u[..., axis] * np.where(positive, backward, forward)
        return result


def make_scheme(name: str) -> Scheme:
    return scheme_registry.create(name)
