"""Case management for the projection solver."""

from __future__ import annotations

from pathlib import Path
from typing import Dict, List, Optional

import numpy as np

from ..core.bc import BoundaryTable
from ..core.field import FieldStore
from ..core.mesh import Mesh
from ..physics.forcing import ForcingTerms
from ..physics.transport import ConstantTransport
from ..solvers.coupling import AdvanceResult, make_coupling
from ..solvers.diagnostics import check_for_nans
from ..utils.io import read_optional_yaml, read_yaml_file
from ..utils.logging import IterationLogger
from .time import TimeControl


class Case:
    """A configured run: mesh, boundaries, state and the integrator driving it."""

    def __init__(self, config: Dict, root: Optional[Path] = None) -> None:
        self.root = Path(root) if root is not None else None
        self.config = config
        self.mesh = self._build_mesh(config.get("mesh", {}))
        self.transport = ConstantTransport.from_dict(config.get("transport"))
        self.store = FieldStore(self.mesh, with_tracer=bool(config.get("tracer", False)))
        self.transport.apply(self.store)
        self.boundaries = BoundaryTable.from_dict(
            self.mesh, config.get("boundaries"), density=self.transport.density()
        )
        self._initialise_fields(config.get("initialFields", {}) or {})
        self.forcing = ForcingTerms.from_config(self.mesh, config.get("forcing"))
        self.time_control = TimeControl.from_dict(config.get("time"))

        coupling_name = config.get("Coupling", "predictorCorrector")
        coupling_cfg = config.get(coupling_name, {}) or {}
        self.logger = IterationLogger(coupling_name, verbose=int(coupling_cfg.get("verbose", 0)))
        max_iterations = coupling_cfg.get("maxIterations")
        self.max_iterations = None if max_iterations is None else int(max_iterations)

        self.time = self.time_control.start
        self.nstep = 0
        self.results: List[AdvanceResult] = []
        self.coupling = make_coupling(coupling_name, self, coupling_cfg)

    @classmethod
    def from_yaml(cls, path: str | Path) -> "Case":
        case_path = Path(path)
        if case_path.name.lower() != "case.yaml":
            raise ValueError("Expected system/case.yaml")
        root = case_path.parent.parent
        config = read_yaml_file(case_path)
        transport = read_optional_yaml(root / "constant" / "transport.yaml")
        if transport is not None:
            config["transport"] = transport
        initial = dict(config.get("initialFields", {}) or {})
        for name in ("U", "p"):
            data = read_optional_yaml(root / "0" / f"{name}.yaml")
            if data is not None:
                initial[name] = data.get("internalField", 0.0)
        config["initialFields"] = initial
        return cls(config=config, root=root)

    def _build_mesh(self, mesh_cfg: Dict) -> Mesh:
        mtype = mesh_cfg.get("type", "structured").lower()
        if mtype != "structured":
            raise NotImplementedError("Only structured meshes are supported")
        cells = mesh_cfg.get("cells")
        if cells is None:
            cells = [int(mesh_cfg.get("nx", 16)), int(mesh_cfg.get("ny", 16))]
            if "nz" in mesh_cfg:
                cells.append(int(mesh_cfg["nz"]))
        lengths = mesh_cfg.get("lengths", [1.0] * len(cells))
        periodic = [bool(p) for p in mesh_cfg.get("periodic", [False, False, True])]
        if len(periodic) == 2:
            periodic.append(True)
        return Mesh.structured(
            cells,
            lengths=lengths,
            max_grid_size=int(mesh_cfg.get("maxGridSize", 32)),
            periodic=periodic,
            origin=mesh_cfg.get("origin", [0.0, 0.0, 0.0]),
        )

    def _parse_uniform(self, entry, vector: bool) -> np.ndarray:
        if isinstance(entry, dict) and "uniform" in entry:
            entry = entry["uniform"]
        if isinstance(entry, str):
            tokens = entry.replace("uniform", "").replace("[", " ").replace("]", " ")
            tokens = tokens.replace("(", " ").replace(")", " ").split()
            entry = [float(tok.strip(",")) for tok in tokens]
        values = np.asarray(entry, dtype=float).reshape(-1)
        if vector:
            if values.size == 1:
                values = np.repeat(values, 3)
            if values.size != 3:
                raise ValueError(f"Vector field needs 3 components, got {values.size}")
            return values
        return values[:1]

    def _taylor_green(self, entry: Dict) -> np.ndarray:
        amplitude = float(entry.get("amplitude", 1.0))
        x, y, _ = self.mesh.cell_centers()
        kx = 2.0 * np.pi / self.mesh.lengths[0]
        ky = 2.0 * np.pi / self.mesh.lengths[1]
        vel = np.zeros((*self.mesh.shape, 3))
        vel[..., 0] = amplitude * np.sin(kx * x) * np.cos(ky * y)
        vel[..., 1] = -amplitude * (kx / ky) * np.cos(kx * x) * np.sin(ky * y)
        return vel

    def _initialise_fields(self, initial: Dict) -> None:
        velocity = initial.get("U", [0.0, 0.0, 0.0])
        if isinstance(velocity, dict) and velocity.get("type", "").lower() == "taylorgreen":
            self.store.velocity.set_interior(self._taylor_green(velocity))
        else:
            self.store.velocity.set_interior(self._parse_uniform(velocity, vector=True))
        pressure = initial.get("p", 0.0)
        self.store.pressure.set_interior(self._parse_uniform(pressure, vector=False)[0])
        gp0 = np.asarray(self.config.get("basePressureGradient", [0.0, 0.0, 0.0]), dtype=float)
        self.store.base_pressure_gradient.set_interior(gp0)

    @property
    def U(self):
        return self.store.velocity

    @property
    def p(self):
        return self.store.pressure

    @property
    def prev_dt(self) -> Optional[float]:
        return self.coupling.prev_dt

    def solve(self) -> Optional[AdvanceResult]:
        result = None
        while not self.time_control.finished(self.time, self.nstep):
            self.transport.update(self.time)
            result = self.coupling.solve_step(self)
            self.results.append(result)
            self.nstep += 1
            if not self.time_control.steady:
                self.time += result.dt
            check_for_nans(self.store)
        return result
