"""Simple time control utilities."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class TimeControl:
    start: float = 0.0
    stop: float = -1.0
    max_steps: int = -1
    steady: bool = True

    def __post_init__(self) -> None:
        if not self.steady and self.stop <= self.start and self.max_steps < 0:
            raise ValueError("Transient runs need a stop time after start or a maxSteps limit")

    def finished(self, time: float, nstep: int) -> bool:
        if self.steady:
            return nstep >= 1
        if self.max_steps >= 0 and nstep >= self.max_steps:
            return True
        return self.stop > 0.0 and time >= self.stop - 1e-12 * max(1.0, abs(self.stop))

    @classmethod
    def from_dict(cls, data):
        if not data:
            return cls()
        mode = data.get("mode", "steady").lower()
        if mode == "steady":
            return cls(steady=True)
        return cls(
            start=float(data.get("start", 0.0)),
            stop=float(data.get("end", data.get("stop", -1.0))),
            max_steps=int(data.get("maxSteps", -1)),
            steady=False,
        )
