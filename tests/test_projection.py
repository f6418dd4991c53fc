import pathlib
import sys

import numpy as np
import pytest

ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from projflow.core.bc import BoundaryTable
from projflow.core.field import FieldStore
from projflow.core.linalg import SolverError
from projflow.core.mesh import Mesh
from projflow.solvers.diagnostics import compute_divu
from projflow.solvers.projection import ProjectionSolver


def _periodic(cells=(16, 4)):
    mesh = Mesh.structured(cells, lengths=(1.0, 0.25), periodic=(True, True, True))
    return mesh, BoundaryTable(mesh, {}), FieldStore(mesh)


def _channel():
    mesh = Mesh.structured((16, 4), lengths=(1.0, 0.25), periodic=(False, True, True))
    table = BoundaryTable.from_dict(
        mesh,
        {
            "xmin": {"type": "massInflow", "velocity": [1.0, 0.0, 0.0]},
            "xmax": {"type": "pressureOutflow", "pressure": 0.0},
        },
    )
    return mesh, table, FieldStore(mesh)


@pytest.mark.parametrize("proj_2", [True, False])
def test_projection_reduces_divergence(proj_2):
    mesh, table, store = _periodic()
    x, _, _ = mesh.cell_centers()
    vel = np.zeros((*mesh.shape, 3))
    vel[..., 0] = np.sin(2.0 * np.pi * x)
    store.velocity.set_interior(vel)

    before = compute_divu(store, table)
    ProjectionSolver(mesh, table).project(store, dt=0.1, proj_2=proj_2)
    after = compute_divu(store, table)

    assert before > 1.0
    assert after < 0.1 * before
    assert store.pressure_gradient.norm0(0) > 0.0
    assert store.pressure.norm0() > 0.0


def test_increment_variant_accumulates_pressure():
    mesh, table, store = _periodic()
    x, _, _ = mesh.cell_centers()
    vel = np.zeros((*mesh.shape, 3))
    vel[..., 0] = np.sin(2.0 * np.pi * x)

    store.velocity.set_interior(vel)
    ProjectionSolver(mesh, table).project(store, dt=0.1, proj_2=False)
    increment = store.pressure.interior.copy()

    store.velocity.set_interior(vel)
    store.pressure.set_interior(1.0)
    ProjectionSolver(mesh, table).project(store, dt=0.1, proj_2=False)
    assert np.allclose(store.pressure.interior, 1.0 + increment, atol=1e-8)


def test_uniform_velocity_is_unchanged():
    mesh, table, store = _periodic()
    store.velocity.set_interior([1.0, 0.5, 0.0])
    stats = ProjectionSolver(mesh, table).project(store, dt=0.1)
    assert stats["iterations"] == 0.0
    assert np.allclose(store.velocity.interior, [1.0, 0.5, 0.0])
    assert np.allclose(store.pressure.interior, 0.0)


def test_uniform_inflow_with_outflow_dirichlet():
    mesh, table, store = _channel()
    store.velocity.set_interior([1.0, 0.0, 0.0])
    ProjectionSolver(mesh, table, method="bicgstab").project(store, dt=0.05)
    assert np.allclose(store.velocity.interior, [1.0, 0.0, 0.0])
    assert np.allclose(store.pressure.interior, 0.0)


def test_direct_and_krylov_agree():
    mesh, table, store = _channel()
    rng = np.random.default_rng(7)
    field = rng.standard_normal((*mesh.shape, 3))
    results = []
    for method in ("direct", "cg"):
        store.velocity.set_interior(field)
        store.pressure.set_interior(0.0)
        store.pressure_gradient.set_interior(0.0)
        ProjectionSolver(mesh, table, method=method, tol=1e-12).project(store, dt=0.1)
        results.append(store.pressure.interior.copy())
    assert np.allclose(results[0], results[1], atol=1e-8)


def test_solver_failure_raises():
    mesh, table, store = _periodic(cells=(16, 16))
    rng = np.random.default_rng(0)
    store.velocity.set_interior(rng.standard_normal((*mesh.shape, 3)))
    solver = ProjectionSolver(mesh, table, tol=1e-14, maxiter=1)
    with pytest.raises(SolverError):
        solver.project(store, dt=0.1)


def test_unknown_method():
    mesh, table, store = _periodic()
    store.velocity.set_interior(np.random.default_rng(1).standard_normal((*mesh.shape, 3)))
    with pytest.raises(NotImplementedError):
        ProjectionSolver(mesh, table, method="gmres").project(store, dt=0.1)
