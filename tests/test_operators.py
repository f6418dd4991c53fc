import pathlib
import sys

import numpy as np
import pytest

ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from projflow.core.bc import BoundaryTable
from projflow.core.field import FieldStore, VectorField
from projflow.core.mesh import Mesh
from projflow.numerics.operators import ExplicitOperators
from projflow.numerics.schemes import scheme_registry

K = 2.0 * np.pi
MU = 0.01


def _taylor_green_store(n: int = 16) -> FieldStore:
    mesh = Mesh.structured((n, n), lengths=(1.0, 1.0), periodic=(True, True, True))
    store = FieldStore(mesh)
    x, y, _ = mesh.cell_centers()
    vel = np.zeros((*mesh.shape, 3))
    vel[..., 0] = np.sin(K * x) * np.cos(K * y)
    vel[..., 1] = -np.cos(K * x) * np.sin(K * y)
    store.velocity.set_interior(vel)
    store.viscosity.set_interior(MU)
    return store


def _evaluate(store: FieldStore, **kwargs):
    ops = ExplicitOperators(BoundaryTable(store.mesh, {}), **kwargs)
    conv = VectorField("conv", store.mesh)
    divtau = VectorField("divtau", store.mesh)
    ops.evaluate(store.velocity, store, conv, divtau)
    return conv.interior, divtau.interior


def test_registered_schemes():
    assert scheme_registry.keys() == ["central", "upwind"]
    with pytest.raises(KeyError):
        ExplicitOperators(None, scheme="quick")


@pytest.mark.parametrize("scheme", ["central", "upwind"])
def test_uniform_flow_has_no_explicit_terms(scheme):
    mesh = Mesh.structured((8, 8, 8), periodic=(True, True, True))
    store = FieldStore(mesh)
    store.velocity.set_interior([1.0, -0.5, 0.25])
    store.viscosity.set_interior(MU)
    conv, divtau = _evaluate(store, scheme=scheme)
    assert np.allclose(conv, 0.0)
    assert np.allclose(divtau, 0.0)


def test_central_convection_of_taylor_green():
    store = _taylor_green_store()
    conv, _ = _evaluate(store)
    x, y, _ = store.mesh.cell_centers()
    assert np.allclose(conv[..., 0], -0.5 * K * np.sin(2 * K * x), atol=0.15)
    assert np.allclose(conv[..., 1], -0.5 * K * np.sin(2 * K * y), atol=0.15)
    assert np.allclose(conv[..., 2], 0.0)


def test_upwind_differs_from_central():
    store = _taylor_green_store()
    central, _ = _evaluate(store, scheme="central")
    upwind, _ = _evaluate(store, scheme="upwind")
    assert not np.allclose(central, upwind)


def test_explicit_viscous_term_of_taylor_green():
    store = _taylor_green_store()
    _, divtau = _evaluate(store, explicit_diffusion=True)
    expected = -2.0 * K**2 * MU * store.velocity.interior
    assert np.allclose(divtau, expected, atol=0.03 * 2.0 * K**2 * MU)


def test_implicit_mode_keeps_only_transpose_part():
    store = _taylor_green_store()
    _, divtau = _evaluate(store, explicit_diffusion=False)
    # constant viscosity and discretely solenoidal velocity
    assert np.allclose(divtau, 0.0, atol=1e-10)


def test_viscous_term_scales_with_inverse_density():
    store = _taylor_green_store()
    _, unit = _evaluate(store)
    store.density.set_interior(2.0)
    _, heavy = _evaluate(store)
    assert np.allclose(heavy, 0.5 * unit)


def test_evaluate_leaves_velocity_interior_untouched():
    store = _taylor_green_store()
    before = store.velocity.interior.copy()
    _evaluate(store)
    assert np.array_equal(store.velocity.interior, before)
