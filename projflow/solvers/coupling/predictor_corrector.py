"""Second-order predictor-corrector projection scheme."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from ...core.field import FieldStore, VectorField, require_positive
from ...numerics.operators import ExplicitOperators
from ..diagnostics import compute_divu, print_max_vel
from ..diffusion import DiffusionSolver
from ..projection import ProjectionSolver
from ..stepsize import StepSizeController
from ..steady import SteadyStateMonitor
from .base import CouplingAgent, register_coupling

logger = logging.getLogger(__name__)


@dataclass
class AdvanceResult:
    dt: float
    iterations: int
    converged: bool


@register_coupling("predictorCorrector")
class PredictorCorrector(CouplingAgent):
    """Fractional-step integrator for variable-density incompressible flow.

    Each outer iteration snapshots the state, takes an explicit predictor
    with the old operators, then a trapezoidal corrector with the operators
    re-evaluated at the predicted velocity. Both sub-steps end with forcing,
    the pressure-gradient update in momentum form, optional implicit
    diffusion and a projection. In steady mode the iteration repeats until
    the velocity stops changing.
    """

    def __init__(self, case, config=None) -> None:
        super().__init__(case, config)
        cfg = self.config
        self.store: FieldStore = case.store
        self.boundaries = case.boundaries
        self.forcing = case.forcing
        self.logger = case.logger

        self.proj_2 = bool(cfg.get("proj2", True))
        self.explicit_diffusion = bool(cfg.get("explicitDiffusion", True))
        self.verbose = int(cfg.get("verbose", 0))
        self.steady_state_tol = float(cfg.get("steadyStateTol", 1.0e-5))

        self.operators = ExplicitOperators(
            self.boundaries,
            scheme=str(cfg.get("convection", "central")),
            explicit_diffusion=self.explicit_diffusion,
        )
        self.step_size = StepSizeController(
            cfl=float(cfg.get("cfl", 0.5)),
            fixed_dt=float(cfg.get("fixedDt", -1.0)),
            explicit_diffusion=self.explicit_diffusion,
            gravity=self.forcing.gravity,
            dt_change_max=float(cfg.get("dtChangeMax", 1.1)),
            max_dt=float(cfg.get("maxDt", 1.0)),
        )
        self.projection = ProjectionSolver(
            case.mesh,
            self.boundaries,
            method=cfg.get("solverP", "cg"),
            tol=float(cfg.get("solverTolP", 1e-10)),
            maxiter=int(cfg.get("solverMaxIterP", 1000)),
        )
        self.diffusion = DiffusionSolver(
            case.mesh,
            self.boundaries,
            method=cfg.get("solverU", "cg"),
            tol=float(cfg.get("solverTolU", 1e-10)),
            maxiter=int(cfg.get("solverMaxIterU", 1000)),
        )
        self.monitor = SteadyStateMonitor(self.steady_state_tol, logger=self.logger)
        self.prev_dt: Optional[float] = None

    def solve_step(self, case) -> AdvanceResult:
        control = case.time_control
        return self.advance(
            case.nstep,
            case.time,
            control.stop,
            control.steady,
            max_iterations=case.max_iterations,
        )

    def advance(
        self,
        nstep: int,
        time: float,
        stop_time: float,
        steady_state: bool,
        max_iterations: Optional[int] = None,
    ) -> AdvanceResult:
        store = self.store
        mesh = store.mesh

        self.boundaries.set_scalar_bcs(store.density, 0)
        if store.tracer is not None:
            self.boundaries.set_scalar_bcs(store.tracer, 1)
        self.boundaries.extrapolate(store.viscosity)
        self.boundaries.set_velocity_bcs(store.velocity)

        previous = self.prev_dt
        iteration = 1
        converged = False
        while True:
            with self.timed("dt"):
                dt = self.step_size.compute_dt(
                    store.velocity,
                    store.density,
                    store.viscosity,
                    store.base_pressure_gradient,
                    mesh.spacing,
                    steady_state,
                    time,
                    stop_time,
                    previous_dt=previous,
                )
            previous = dt
            if not steady_state:
                logger.info(
                    "Step %d: from old_time %.6e to new_time %.6e with dt = %.6e",
                    nstep + 1,
                    time,
                    time + dt,
                    dt,
                )
            old = store.snapshot()

            with store.temporaries("conv_old", "divtau_old") as (conv_old, divtau_old):
                with self.timed("predictor"):
                    self.apply_predictor(conv_old, divtau_old, dt, time)
                if self.verbose > 0:
                    self._report(nstep, iteration, time, dt, "predictor")
                with self.timed("corrector"):
                    self.apply_corrector(conv_old, divtau_old, dt, time)
                if self.verbose > 0:
                    self._report(nstep, iteration, time, dt, "corrector")

            if not steady_state:
                break
            with self.timed("steady_check"):
                converged = self.monitor.is_converged(
                    store.velocity,
                    old.velocity,
                    store.pressure,
                    old.pressure,
                    dt,
                    iteration,
                )
            if converged:
                break
            if max_iterations is not None and iteration >= max_iterations:
                logger.warning(
                    "Steady state not reached after %d iterations (tol %.3e)",
                    iteration,
                    self.steady_state_tol,
                )
                break
            iteration += 1

        self.prev_dt = dt
        return AdvanceResult(dt=dt, iterations=iteration, converged=converged)

    def apply_predictor(
        self,
        conv_old: VectorField,
        divtau_old: VectorField,
        dt: float,
        time: float,
    ) -> None:
        """Explicit Euler step with operators at the snapshot velocity."""

        store = self.store
        old = store.require_snapshot()
        self.operators.evaluate(old.velocity, store, conv_old, divtau_old)
        store.velocity.saxpy(dt, conv_old)
        store.velocity.saxpy(dt, divtau_old)
        self._complete_update(dt, time)

    def apply_corrector(
        self,
        conv_old: VectorField,
        divtau_old: VectorField,
        dt: float,
        time: float,
    ) -> None:
        """Trapezoidal step averaging old and predicted operators."""

        store = self.store
        old = store.require_snapshot()
        with store.temporaries("conv", "divtau") as (conv, divtau):
            self.operators.evaluate(store.velocity, store, conv, divtau)
            vel = store.velocity
            vel.copy_from(old.velocity)
            vel.saxpy(0.5 * dt, conv)
            vel.saxpy(0.5 * dt, conv_old)
            vel.saxpy(0.5 * dt, divtau)
            vel.saxpy(0.5 * dt, divtau_old)
        self._complete_update(dt, time)

    def _complete_update(self, dt: float, time: float) -> None:
        store = self.store
        self.forcing.apply(store, dt, time)
        self.subtract_pressure_gradient(dt)
        if not self.explicit_diffusion:
            with self.timed("diffusion"):
                self.diffusion.diffuse(store, dt)
        with self.timed("projection"):
            stats = self.projection.project(store, dt, self.proj_2)
        if self.verbose > 0:
            self.logger.record(
                len(self.logger.history) + 1,
                {"p_iters": stats["iterations"], "p_res": stats["final"]},
                stage="projection",
            )

    def subtract_pressure_gradient(self, dt: float) -> None:
        """``u -= dt (gp + gp0) / rho``, carried out on momentum."""

        store = self.store
        require_positive(store.density)
        vel = store.velocity
        interior = store.mesh.interior
        vel.multiply(store.density)
        vel.values[interior] -= dt * (
            store.pressure_gradient.interior + store.base_pressure_gradient.interior
        )
        vel.divide(store.density)

    def _report(self, nstep: int, iteration: int, time: float, dt: float, stage: str) -> None:
        stats = print_max_vel(self.store)
        stats["divu"] = compute_divu(self.store, self.boundaries)
        logger.info("%s divu = %.6e", stage, stats["divu"])
        stats["step"] = float(nstep + 1)
        stats["time"] = time
        stats["dt"] = dt
        self.logger.record(iteration, stats, stage=stage)
