import pathlib
import sys

import numpy as np
import pytest

ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from projflow.core.field import FieldStore
from projflow.core.mesh import Mesh
from projflow.physics.actuator import UniformCtDisk
from projflow.physics.forcing import ForcingTerms


def _store():
    mesh = Mesh.structured((20, 8, 8), lengths=(2.0, 0.8, 0.8), periodic=(True, True, True))
    store = FieldStore(mesh)
    store.velocity.set_interior([1.0, 0.0, 0.0])
    return store


DISK = {
    "center": [1.0, 0.4, 0.4],
    "normal": [1.0, 0.0, 0.0],
    "diameter": 0.4,
    "thickness": 0.2,
    "sampleDistance": 0.45,
    "tableVelocity": [0.0, 2.0],
    "thrustCoeff": [1.0, 0.5],
}


def test_no_forcing_is_a_no_op():
    store = _store()
    forcing = ForcingTerms.from_config(store.mesh, None)
    forcing.apply(store, dt=0.1, time=0.0)
    assert len(forcing) == 0
    assert np.allclose(store.velocity.interior, [1.0, 0.0, 0.0])


def test_gravity_accelerates_uniformly():
    store = _store()
    forcing = ForcingTerms.from_config(store.mesh, {"gravity": {"g": [0.0, 0.0, -2.0]}})
    forcing.apply(store, dt=0.5, time=0.0)
    assert np.allclose(forcing.gravity, [0.0, 0.0, -2.0])
    assert np.allclose(store.velocity.interior, [1.0, 0.0, -1.0])


def test_actuator_disk_decelerates_inside_disk():
    store = _store()
    forcing = ForcingTerms.from_config(store.mesh, {"actuatorDisk": DISK})
    disk = forcing.terms[0]
    assert isinstance(disk, UniformCtDisk)

    forcing.apply(store, dt=0.1, time=0.0)

    assert np.isclose(disk.current_ct, 0.75)
    assert np.allclose(disk.reference_velocity, [1.0, 0.0, 0.0])
    expected = 1.0 - 0.1 * 0.5 * 0.75 / 0.2
    u = store.velocity.interior[..., 0]
    assert np.allclose(u[disk.disk_mask], expected)
    assert np.allclose(u[~disk.disk_mask], 1.0)
    assert np.allclose(forcing.gravity, 0.0)


def test_actuator_disk_outside_domain_rejected():
    store = _store()
    config = dict(DISK, center=[5.0, 0.4, 0.4])
    with pytest.raises(ValueError):
        ForcingTerms.from_config(store.mesh, {"actuatorDisk": config})


def test_unknown_forcing_rejected():
    store = _store()
    with pytest.raises(KeyError):
        ForcingTerms.from_config(store.mesh, {"coriolis": {}})
