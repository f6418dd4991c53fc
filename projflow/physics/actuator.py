"""Uniform thrust-coefficient actuator disk."""

from __future__ import annotations

from typing import Dict, Optional

import numpy as np

from ..core.field import FieldStore
from ..core.mesh import Mesh
from .forcing import ForcingTerm, register_forcing


@register_forcing("actuatorDisk")
class UniformCtDisk(ForcingTerm):
    """Axial momentum sink spread uniformly over a thin cylindrical disk.

    The free-stream speed is the mean velocity over a disk-sized plane
    ``sampleDistance`` upstream; ``Ct`` is interpolated from the
    ``tableVelocity``/``thrustCoeff`` table at ``|U_inf . n|``. Inside the disk
    the acceleration is ``0.5 Ct (U_inf . n)^2 / thickness`` along ``-n``.
    """

    def __init__(self, mesh: Mesh, config: Optional[Dict] = None) -> None:
        super().__init__(mesh, config)
        cfg = self.config
        self.center = np.asarray(cfg.get("center", [0.5, 0.5, 0.5]), dtype=float)
        normal = np.asarray(cfg.get("normal", [1.0, 0.0, 0.0]), dtype=float)
        norm = float(np.linalg.norm(normal))
        if norm == 0.0:
            raise ValueError("actuatorDisk.normal must be non-zero")
        self.normal = normal / norm
        self.diameter = float(cfg.get("diameter", 0.25))
        self.thickness = float(cfg.get("thickness", max(mesh.spacing)))
        if self.diameter <= 0.0 or self.thickness <= 0.0:
            raise ValueError("actuatorDisk diameter and thickness must be positive")
        self.sample_distance = float(cfg.get("sampleDistance", self.diameter))
        self.table_velocity = np.asarray(cfg.get("tableVelocity", [0.0, 1.0]), dtype=float)
        self.thrust_coeff = np.asarray(cfg.get("thrustCoeff", [0.75, 0.75]), dtype=float)
        if self.table_velocity.shape != self.thrust_coeff.shape:
            raise ValueError("tableVelocity and thrustCoeff must have the same length")

        self.disk_mask = self._slab(self.center, 0.5 * self.thickness)
        if not self.disk_mask.any():
            raise ValueError("actuatorDisk does not intersect any cell")
        upstream = self.center - self.sample_distance * self.normal
        half_cell = 0.5 * float(np.abs(self.normal) @ np.asarray(mesh.spacing))
        self.sample_mask = self._slab(upstream, half_cell)
        if not self.sample_mask.any():
            raise ValueError("actuatorDisk sample plane lies outside the domain")

        self.reference_velocity = np.zeros(3)
        self.mean_disk_velocity = np.zeros(3)
        self.current_ct = 0.0

    def _slab(self, point: np.ndarray, half_width: float) -> np.ndarray:
        offset = np.stack(self.mesh.cell_centers(), axis=-1) - point
        axial = offset @ self.normal
        radial = np.linalg.norm(offset - axial[..., None] * self.normal, axis=-1)
        return (np.abs(axial) <= half_width) & (radial <= 0.5 * self.diameter)

    def update_velocities(self, store: FieldStore) -> None:
        vel = store.velocity.interior
        self.reference_velocity = vel[self.sample_mask].mean(axis=0)
        self.mean_disk_velocity = vel[self.disk_mask].mean(axis=0)

    def acceleration(self, store: FieldStore, time: float) -> np.ndarray:
        self.update_velocities(store)
        u_normal = float(self.reference_velocity @ self.normal)
        self.current_ct = float(np.interp(abs(u_normal), self.table_velocity, self.thrust_coeff))
        magnitude = 0.5 * self.current_ct * u_normal * u_normal / self.thickness
        source = np.zeros((*self.mesh.shape, 3))
        source[self.disk_mask] = -magnitude * self.normal
        return source
