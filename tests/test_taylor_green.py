import pathlib
import sys

import numpy as np
import pytest

ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

plt = pytest.importorskip("matplotlib.pyplot")

from projflow import Case

ARTIFACTS = pathlib.Path(__file__).parent / "artifacts"
ARTIFACTS.mkdir(parents=True, exist_ok=True)

NU = 0.01
K = 2.0 * np.pi


def _run(cells: int, end: float = 0.2):
    case = Case(
        {
            "mesh": {"cells": [cells, cells], "lengths": [1.0, 1.0], "periodic": [True, True]},
            "transport": {"rho": 1.0, "mu": NU},
            "initialFields": {"U": {"type": "taylorGreen", "amplitude": 1.0}},
            "time": {"mode": "transient", "end": end},
            "predictorCorrector": {"cfl": 0.5},
        }
    )
    e0 = float(np.sum(case.U.interior**2))
    times, ratios = [0.0], [1.0]
    while not case.time_control.finished(case.time, case.nstep):
        result = case.coupling.solve_step(case)
        case.nstep += 1
        case.time += result.dt
        times.append(case.time)
        ratios.append(float(np.sum(case.U.interior**2)) / e0)
    return np.asarray(times), np.asarray(ratios)


def test_taylor_green_decay_converges_with_resolution():
    errors = {}
    fig, ax = plt.subplots()
    for cells in (8, 16):
        times, ratios = _run(cells)
        analytic = np.exp(-4.0 * NU * K**2 * times)
        errors[cells] = float(np.max(np.abs(ratios - analytic)))
        ax.plot(times, ratios, marker=".", label=f"{cells}^2")
    ax.plot(times, analytic, "k--", label="Analytic")
    ax.set_xlabel("t")
    ax.set_ylabel("E / E0")
    ax.legend()
    fig.savefig(ARTIFACTS / "taylor_green_decay.png", dpi=120, bbox_inches="tight")
    plt.close(fig)

    assert errors[16] < errors[8]
    assert errors[16] < 0.05
