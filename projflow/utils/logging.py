"""Iteration records for the time integrator."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List


@dataclass
class IterationLogger:
    name: str
    verbose: int = 1
    history: List[Dict[str, float]] = field(default_factory=list)

    def record(self, iteration: int, metrics: Dict[str, float], stage: str = "") -> Dict[str, float]:
        """Append to the history without printing."""

        entry = {"iter": iteration, **metrics}
        if stage:
            entry["stage"] = stage
        self.history.append(entry)
        return entry

    def log(self, iteration: int, metrics: Dict[str, float], stage: str = "") -> None:
        self.record(iteration, metrics, stage)
        if self.verbose <= 0:
            return
        label = f"{self.name} {stage}".rstrip()
        pieces = [f"{label} iter {iteration:3d}"]
        for name, value in metrics.items():
            pieces.append(f"{name} = {value:.3e}")
        print(" | ".join(pieces), flush=True)

    def last(self, stage: str | None = None) -> Dict[str, float]:
        for entry in reversed(self.history):
            if stage is None or entry.get("stage") == stage:
                return entry
        raise LookupError(f"No {stage or 'iteration'} record logged yet")

    def clear(self) -> None:
        self.history.clear()
