"""Time-step selection from the CFL bound or a fixed step."""

from __future__ import annotations

import logging
from typing import Optional, Sequence

from ..core.field import ScalarField, VectorField
from ..numerics.stability import compute_new_dt

logger = logging.getLogger(__name__)


class StepSizeController:
    def __init__(
        self,
        cfl: float = 0.5,
        fixed_dt: float = -1.0,
        explicit_diffusion: bool = True,
        gravity: Sequence[float] = (0.0, 0.0, 0.0),
        dt_change_max: float = 1.1,
        max_dt: float = 1.0,
    ) -> None:
        self.cfl = float(cfl)
        self.fixed_dt = float(fixed_dt)
        self.explicit_diffusion = bool(explicit_diffusion)
        self.gravity = tuple(float(g) for g in gravity)
        self.dt_change_max = float(dt_change_max)
        self.max_dt = float(max_dt)

    def compute_dt(
        self,
        velocity: VectorField,
        density: ScalarField,
        viscosity: ScalarField,
        base_pressure_gradient: VectorField,
        cell_size: Sequence[float],
        steady_state: bool,
        time: float,
        stop_time: float,
        previous_dt: Optional[float] = None,
    ) -> float:
        """Return the step to take; a fixed step is always honoured."""

        umax = [velocity.norm0(comp) for comp in range(3)]
        gp0max = [base_pressure_gradient.norm0(comp) for comp in range(3)]
        dt_new = compute_new_dt(
            umax,
            romax=density.norm0(),
            mumax=viscosity.norm0(),
            gradp0max=gp0max,
            cell_size=cell_size,
            cfl=self.cfl,
            explicit_diffusion=self.explicit_diffusion,
            gravity=self.gravity,
            max_dt=self.max_dt,
            previous_dt=previous_dt,
            dt_change_max=self.dt_change_max,
            steady_state=steady_state,
            time=time,
            stop_time=stop_time,
        )

        if self.fixed_dt > 0.0:
            if dt_new < self.fixed_dt:
                logger.warning(
                    "fixed_dt does not satisfy CFL condition: fixed dt %.6e > CFL dt %.6e",
                    self.fixed_dt,
                    dt_new,
                )
            return self.fixed_dt
        return dt_new
