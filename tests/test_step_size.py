import logging
import pathlib
import sys

import numpy as np
import pytest

ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from projflow.core.field import FieldStore
from projflow.core.mesh import Mesh
from projflow.numerics.stability import compute_new_dt
from projflow.solvers.stepsize import StepSizeController


def _store(velocity=(1.0, 0.0, 0.0), mu=0.0) -> FieldStore:
    mesh = Mesh.structured((10, 4, 4), lengths=(1.0, 0.4, 0.4), periodic=(True, True, True))
    store = FieldStore(mesh)
    store.velocity.set_interior(velocity)
    store.viscosity.set_interior(mu)
    return store


def _dt(controller, store, **kwargs):
    args = dict(steady_state=True, time=0.0, stop_time=-1.0)
    args.update(kwargs)
    return controller.compute_dt(
        store.velocity,
        store.density,
        store.viscosity,
        store.base_pressure_gradient,
        store.mesh.spacing,
        **args,
    )


def test_convective_bound():
    controller = StepSizeController(cfl=0.5, explicit_diffusion=False)
    assert np.isclose(_dt(controller, _store()), 0.05)


def test_viscous_rate_only_when_explicit():
    store = _store(mu=0.01)
    explicit = _dt(StepSizeController(cfl=0.5, explicit_diffusion=True), store)
    implicit = _dt(StepSizeController(cfl=0.5, explicit_diffusion=False), store)
    rate = 10.0 + 2.0 * 0.01 * 3 * 100.0
    assert np.isclose(explicit, 2 * 0.5 / (2 * rate))
    assert explicit < implicit


def test_forcing_rate_shrinks_step():
    base = compute_new_dt([1.0, 0.0, 0.0], 1.0, 0.0, [0.0] * 3, [0.1] * 3, cfl=0.5)
    forced = compute_new_dt(
        [1.0, 0.0, 0.0], 1.0, 0.0, [0.0] * 3, [0.1] * 3, cfl=0.5, gravity=(0.0, 0.0, -9.81)
    )
    assert forced < base


def test_quiescent_state_uses_max_dt():
    controller = StepSizeController(cfl=0.5, explicit_diffusion=False, max_dt=0.25)
    assert _dt(controller, _store(velocity=(0.0, 0.0, 0.0))) == 0.25


def test_growth_limited_by_previous_step():
    controller = StepSizeController(cfl=0.5, explicit_diffusion=False, dt_change_max=1.1)
    assert np.isclose(_dt(controller, _store(), previous_dt=0.01), 0.011)


def test_transient_step_clamped_at_stop_time():
    controller = StepSizeController(cfl=0.5, explicit_diffusion=False)
    dt = _dt(controller, _store(), steady_state=False, time=0.99, stop_time=1.0)
    assert np.isclose(dt, 0.01)
    dt_steady = _dt(controller, _store(), steady_state=True, time=0.99, stop_time=1.0)
    assert np.isclose(dt_steady, 0.05)


def test_fixed_dt_over_bound_warns_and_is_used(caplog):
    controller = StepSizeController(cfl=0.5, fixed_dt=0.2, explicit_diffusion=False)
    with caplog.at_level(logging.WARNING):
        dt = _dt(controller, _store())
    assert dt == 0.2
    assert "fixed_dt does not satisfy CFL condition" in caplog.text


def test_fixed_dt_within_bound_is_silent(caplog):
    controller = StepSizeController(cfl=0.5, fixed_dt=0.01, explicit_diffusion=False)
    with caplog.at_level(logging.WARNING):
        dt = _dt(controller, _store())
    assert dt == 0.01
    assert "fixed_dt" not in caplog.text


def test_invalid_cfl_rejected():
    with pytest.raises(ValueError):
        compute_new_dt([1.0, 0.0, 0.0], 1.0, 0.0, [0.0] * 3, [0.1] * 3, cfl=0.0)
