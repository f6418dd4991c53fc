import pathlib
import sys

import numpy as np
import pytest

ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from projflow.core.bc import BoundaryTable, MassInflow, NoSlipWall, PressureOutflow
from projflow.core.field import ScalarField, VectorField
from projflow.core.mesh import Mesh

NG = 2


def _channel():
    mesh = Mesh.structured((4, 3, 2), lengths=(1.0, 0.75, 0.5), periodic=(False, True, True))
    table = BoundaryTable.from_dict(
        mesh,
        {
            "xmin": {"type": "massInflow", "velocity": [2.0, 0.0, 0.0], "density": 3.0, "tracer": 0.5},
            "xmax": {"type": "pressureOutflow", "pressure": 1.5},
        },
    )
    return mesh, table


def _walls(density=2.0):
    mesh = Mesh.structured((3, 4, 2), periodic=(True, False, True))
    table = BoundaryTable.from_dict(
        mesh,
        {"ymin": "noSlipWall", "ymax": {"type": "movingWall", "velocity": [1.0, 0.0, 0.0]}},
        density=density,
    )
    return mesh, table


def test_table_types_from_dict():
    _, table = _channel()
    assert isinstance(table["xmin"], MassInflow)
    assert isinstance(table["xmax"], PressureOutflow)
    _, walls = _walls()
    assert isinstance(walls["ymin"], NoSlipWall)
    assert walls["ymin"].velocity_dirichlet


def test_inflow_velocity_reflects_about_face_value():
    mesh, table = _channel()
    vel = VectorField("U", mesh, [1.0, 0.0, 0.0])
    table.set_velocity_bcs(vel)
    inner_ghost = vel.values[NG - 1, NG:-NG, NG:-NG, 0]
    first = vel.values[NG, NG:-NG, NG:-NG, 0]
    assert np.allclose(0.5 * (inner_ghost + first), 2.0)
    assert np.allclose(vel.values[-NG, NG:-NG, NG:-NG, 0], 1.0)


def test_walls_hold_face_velocity():
    mesh, table = _walls()
    vel = VectorField("U", mesh, [0.5, 0.0, 0.0])
    table.set_velocity_bcs(vel)
    assert np.allclose(vel.values[NG:-NG, NG - 1, NG:-NG, 0], -0.5)
    assert np.allclose(vel.values[NG:-NG, -NG, NG:-NG, 0], 1.5)


def test_density_and_tracer_use_their_own_tables():
    mesh, table = _channel()
    rho = ScalarField("rho", mesh, 1.0)
    tracer = ScalarField("tracer", mesh, 0.0)
    table.set_scalar_bcs(rho, 0)
    table.set_scalar_bcs(tracer, 1)
    assert np.allclose(rho.values[:NG, NG:-NG, NG:-NG], 3.0)
    assert np.allclose(tracer.values[:NG, NG:-NG, NG:-NG], 0.5)
    # pressure faces extrapolate
    assert np.allclose(rho.values[-NG:, NG:-NG, NG:-NG], 1.0)
    assert np.allclose(tracer.values[-NG:, NG:-NG, NG:-NG], 0.0)


def test_wall_faces_take_table_density():
    mesh, table = _walls(density=2.0)
    rho = ScalarField("rho", mesh, 1.0)
    table.set_scalar_bcs(rho, 0)
    assert np.allclose(rho.values[NG:-NG, :NG, NG:-NG], 2.0)
    assert np.allclose(rho.values[NG:-NG, -NG:, NG:-NG], 2.0)


def test_unknown_scalar_component():
    mesh, table = _channel()
    with pytest.raises(ValueError):
        table.set_scalar_bcs(ScalarField("s", mesh), 2)


def test_pressure_dirichlet_at_outflow():
    mesh, table = _channel()
    p = ScalarField("p", mesh, 0.0)
    table.set_pressure_bcs(p)
    assert np.allclose(p.values[-NG, NG:-NG, NG:-NG], 3.0)
    table.set_pressure_bcs(p, homogeneous=True)
    assert np.allclose(p.values[-NG, NG:-NG, NG:-NG], 0.0)
    assert table.pressure_dirichlet() == {"xmax": 1.5}
    assert table.pressure_dirichlet(homogeneous=True) == {"xmax": 0.0}
    assert table.velocity_dirichlet(0) == {"xmin": 2.0}
    assert table.has_pressure_dirichlet


def test_viscosity_extrapolates_everywhere():
    mesh, table = _walls()
    mu = ScalarField("mu", mesh, 0.1)
    table.extrapolate(mu)
    assert np.allclose(mu.values, 0.1)


def test_missing_face_rejected():
    mesh = Mesh.structured((4, 3, 2), periodic=(False, True, True))
    with pytest.raises(ValueError, match="xmax"):
        BoundaryTable.from_dict(mesh, {"xmin": "noSlipWall"})


def test_periodic_face_rejected():
    mesh = Mesh.structured((4, 3, 2), periodic=(True, True, True))
    with pytest.raises(ValueError):
        BoundaryTable.from_dict(mesh, {"xmin": "noSlipWall"})


def test_unknown_type_rejected():
    mesh = Mesh.structured((4, 3, 2), periodic=(False, True, True))
    with pytest.raises(ValueError, match="Unknown boundary type"):
        BoundaryTable.from_dict(mesh, {"xmin": "slipWall", "xmax": "pout"})
