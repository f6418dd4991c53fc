"""Run a case directory and report timings and final state.

Usage:
    python scripts/run_case.py --case tests/cases/channel/system/case.yaml --profile

Prints the per-phase timing breakdown of the predictor-corrector agent when
profiling is on and writes a JSON summary (steps, time, last dt, field maxima).
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from time import perf_counter

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from projflow import Case


def run_case(case_path: Path, profile: bool) -> dict:
    case = Case.from_yaml(case_path)
    coupling = case.coupling
    coupling.enable_profiling(profile)
    start = perf_counter()
    result = case.solve()
    wall = perf_counter() - start
    summary = {
        "steps": case.nstep,
        "time": case.time,
        "prev_dt": case.prev_dt,
        "iterations": result.iterations if result is not None else 0,
        "converged": bool(result.converged) if result is not None else False,
        "max": case.store.max_abs(),
        "wall_clock": wall,
    }
    if profile:
        summary["timings"] = coupling.get_timings()
    return summary


def main() -> None:
    parser = argparse.ArgumentParser(description="Run a projection-solver case")
    parser.add_argument(
        "--case",
        type=Path,
        default=Path("tests/cases/channel/system/case.yaml"),
        help="Path to system/case.yaml",
    )
    parser.add_argument("--profile", action="store_true", help="Collect per-phase timings")
    parser.add_argument("--output", type=Path, help="Optional JSON file for the summary")
    parser.add_argument("--log-level", default="WARNING", help="Python logging level")
    args = parser.parse_args()

    logging.basicConfig(level=args.log_level.upper(), format="%(levelname)s %(name)s: %(message)s")

    summary = run_case(args.case, args.profile)
    for key, value in sorted(summary.get("timings", {}).items(), key=lambda kv: kv[1], reverse=True):
        pct = 100.0 * value / (summary["wall_clock"] or 1.0)
        print(f"{key:>20}: {value:8.4f} s ({pct:5.1f}%)")

    text = json.dumps(summary, indent=2)
    print(text)
    if args.output is not None:
        args.output.parent.mkdir(parents=True, exist_ok=True)
        args.output.write_text(text)
        print(f"\nWrote summary to {args.output}")


if __name__ == "__main__":
    main()
