"""Taylor-Green vortex decay against the analytic energy envelope.

Usage:
    python scripts/taylor_green_decay.py --cells 16 32 --end 0.5

Runs a periodic 2-D Taylor-Green vortex at each resolution with explicit and
implicit diffusion and plots the kinetic-energy ratio ``E(t)/E(0)`` against
``exp(-4 nu k^2 t)``.
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

import numpy as np

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import matplotlib

matplotlib.use("Agg")
import matplotlib.pyplot as plt

from projflow import Case

ARTIFACTS = ROOT / "tests" / "artifacts"


def _config(cells: int, nu: float, end: float, explicit: bool) -> dict:
    return {
        "mesh": {"cells": [cells, cells], "lengths": [1.0, 1.0], "periodic": [True, True]},
        "transport": {"rho": 1.0, "mu": nu},
        "initialFields": {"U": {"type": "taylorGreen", "amplitude": 1.0}},
        "time": {"mode": "transient", "end": end},
        "Coupling": "predictorCorrector",
        "predictorCorrector": {"cfl": 0.5, "explicitDiffusion": explicit},
    }


def energy_history(cells: int, nu: float, end: float, explicit: bool):
    case = Case(_config(cells, nu, end, explicit))

    def energy() -> float:
        return float(0.5 * np.sum(case.U.interior**2))

    e0 = energy()
    times, ratios = [0.0], [1.0]
    while not case.time_control.finished(case.time, case.nstep):
        result = case.coupling.solve_step(case)
        case.nstep += 1
        case.time += result.dt
        times.append(case.time)
        ratios.append(energy() / e0)
    return np.asarray(times), np.asarray(ratios)


def main() -> None:
    parser = argparse.ArgumentParser(description="Taylor-Green decay benchmark")
    parser.add_argument("--cells", type=int, nargs="+", default=[16, 32])
    parser.add_argument("--nu", type=float, default=0.01)
    parser.add_argument("--end", type=float, default=0.5)
    parser.add_argument("--output", type=Path, default=ARTIFACTS / "taylor_green_decay.png")
    args = parser.parse_args()

    k = 2.0 * np.pi
    fig, ax = plt.subplots()
    for cells in args.cells:
        for explicit in (True, False):
            times, ratios = energy_history(cells, args.nu, args.end, explicit)
            analytic = np.exp(-4.0 * args.nu * k**2 * times)
            err = float(np.max(np.abs(ratios - analytic) / analytic))
            label = f"{cells}^2 {'explicit' if explicit else 'implicit'}"
            print(f"{label:>20}: {len(times) - 1:4d} steps, max rel. error {err:.3e}")
            ax.plot(times, ratios, marker=".", label=label)
    t = np.linspace(0.0, args.end, 200)
    ax.plot(t, np.exp(-4.0 * args.nu * k**2 * t), "k--", label="Analytic")
    ax.set_xlabel("t")
    ax.set_ylabel("E / E0")
    ax.set_title("Taylor-Green vortex decay")
    ax.legend()
    args.output.parent.mkdir(parents=True, exist_ok=True)
    fig.savefig(args.output, dpi=150, bbox_inches="tight")
    plt.close(fig)
    print(f"Wrote {args.output}")


if __name__ == "__main__":
    main()
