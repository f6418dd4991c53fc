"""Finite-difference kernels on halo-padded structured arrays.

Every kernel reads ghost cells, so boundary data must be filled (and the halo
exchanged) before calling it. Results are returned on the valid region, or on
the valid region grown by ``expand`` cells where a kernel supports it.
"""

from __future__ import annotations

from typing import List, Sequence

import numpy as np

from .mesh import Mesh


def offset(axis: int, step: int) -> tuple:
    shift = [0, 0, 0]
    shift[axis] = step
    return tuple(shift)


def ddx(mesh: Mesh, values: np.ndarray, axis: int, expand: int = 0) -> np.ndarray:
    """Second-order central derivative along ``axis``."""

    h = mesh.spacing[axis]
    plus = values[mesh.region(expand, offset(axis, 1))]
    minus = values[mesh.region(expand, offset(axis, -1))]
    return (plus - minus) / (2.0 * h)


def one_sided(mesh: Mesh, values: np.ndarray, axis: int, side: int) -> np.ndarray:
    """First-order backward (``side=-1``) or forward (``side=+1``) difference."""

    h = mesh.spacing[axis]
    centre = values[mesh.region()]
    other = values[mesh.region(0, offset(axis, side))]
    return side * (other - centre) / h


def gradient(mesh: Mesh, values: np.ndarray) -> np.ndarray:
    return np.stack([ddx(mesh, values, axis) for axis in range(3)], axis=-1)


def divergence(mesh: Mesh, values: np.ndarray) -> np.ndarray:
    return sum(ddx(mesh, values[..., axis], axis) for axis in range(3))


def laplacian(mesh: Mesh, values: np.ndarray, coeff: np.ndarray) -> np.ndarray:
    """Compact ``div(coeff grad(values))`` for a scalar array, arithmetic face means."""

    centre = values[mesh.region()]
    k_centre = coeff[mesh.region()]
    result = np.zeros_like(centre)
    for axis in range(3):
        h2 = mesh.spacing[axis] ** 2
        up = values[mesh.region(0, offset(axis, 1))]
        down = values[mesh.region(0, offset(axis, -1))]
        k_up = 0.5 * (k_centre + coeff[mesh.region(0, offset(axis, 1))])
        k_down = 0.5 * (k_centre + coeff[mesh.region(0, offset(axis, -1))])
        result += (k_up * (up - centre) - k_down * (centre - down)) / h2
    return result


def _inner_ddx(values: np.ndarray, axis: int, h: float) -> np.ndarray:
    """Central derivative of an array that carries exactly one extra layer."""

    plus: List[slice] = [slice(1, -1)] * 3
    minus: List[slice] = [slice(1, -1)] * 3
    plus[axis] = slice(2, None)
    minus[axis] = slice(None, -2)
    return (values[tuple(plus)] - values[tuple(minus)]) / (2.0 * h)


def transpose_stress_divergence(mesh: Mesh, velocity: np.ndarray, viscosity: np.ndarray) -> np.ndarray:
    """Off-diagonal viscous part ``d/dx_j (mu du_j/dx_i)`` for every component ``i``."""

    mu = viscosity[mesh.region(1)]
    result = np.zeros(velocity[mesh.region()].shape)
    for i in range(3):
        for j in range(3):
            flux = mu * ddx(mesh, velocity[..., j], i, expand=1)
            result[..., i] += _inner_ddx(flux, j, mesh.spacing[j])
    return result


def face_average(mesh: Mesh, values: np.ndarray, axis: int) -> np.ndarray:
    """Arithmetic mean of a cell array on the ``n+1`` faces normal to ``axis``."""

    ng = mesh.ngrow
    n = mesh.shape[axis]
    lower = list(mesh.region())
    upper = list(mesh.region())
    lower[axis] = slice(ng - 1, ng + n)
    upper[axis] = slice(ng, ng + n + 1)
    return 0.5 * (values[tuple(lower)] + values[tuple(upper)])


def face_coefficients(mesh: Mesh, values: np.ndarray) -> Sequence[np.ndarray]:
    return [face_average(mesh, values, axis) for axis in range(3)]
