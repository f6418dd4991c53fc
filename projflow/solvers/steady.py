"""Convergence test for the steady-seeking outer loop."""

from __future__ import annotations

from typing import Optional

import numpy as np

from ..core.field import ScalarField, VectorField
from ..utils.logging import IterationLogger

# Below this old-state L1 norm a component's relative change is taken as zero.
L1_FLOOR = 1.0e-8


class SteadyStateMonitor:
    """Declare convergence when velocity stops changing between iterations.

    Criterion 1 bounds the pointwise change per unit time:
    ``max|u_d - u_d_old| < tol * dt`` for every component ``d``.
    Criterion 2 bounds the relative L1 change ``|du_d|_1 / |u_d_old|_1 < tol``.
    Either one suffices. The pressure ratio is recorded but never gates.
    """

    def __init__(self, tol: float = 1.0e-5, logger: Optional[IterationLogger] = None) -> None:
        self.tol = float(tol)
        self.logger = logger or IterationLogger("steady", verbose=0)

    @staticmethod
    def _ratio(diff_norm: float, old_norm: float) -> float:
        if old_norm < L1_FLOOR:
            return 0.0
        return diff_norm / old_norm

    def is_converged(
        self,
        velocity: VectorField,
        old_velocity: VectorField,
        pressure: ScalarField,
        old_pressure: ScalarField,
        dt: float,
        iteration: int,
        tol: Optional[float] = None,
    ) -> bool:
        tol = self.tol if tol is None else float(tol)
        mesh = velocity.mesh
        diff = velocity.values - old_velocity.values
        dp = pressure.values - old_pressure.values

        delta = [mesh.norm0(diff, comp) for comp in range(3)]
        ratios = [
            self._ratio(mesh.norm1(diff, comp), old_velocity.norm1(comp)) for comp in range(3)
        ]
        p_ratio = self._ratio(mesh.norm1(dp), old_pressure.norm1())

        condition1 = all(d < tol * dt for d in delta)
        condition2 = all(r < tol for r in ratios)

        self.logger.log(
            iteration,
            {
                "du_max": float(np.max(delta)) / dt if dt > 0.0 else float("inf"),
                "du_l1": ratios[0],
                "dv_l1": ratios[1],
                "dw_l1": ratios[2],
                "dp_l1": p_ratio,
                "tol": tol,
            },
            stage="steady",
        )

        if iteration == 1:
            return False
        return condition1 or condition2
