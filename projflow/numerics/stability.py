"""Explicit time-step bound for the predictor-corrector scheme."""

from __future__ import annotations

import math
from typing import Optional, Sequence


def compute_new_dt(
    umax: Sequence[float],
    romax: float,
    mumax: float,
    gradp0max: Sequence[float],
    cell_size: Sequence[float],
    cfl: float,
    explicit_diffusion: bool = True,
    gravity: Sequence[float] = (0.0, 0.0, 0.0),
    max_dt: float = 1.0,
    previous_dt: Optional[float] = None,
    dt_change_max: float = 1.1,
    steady_state: bool = False,
    time: float = 0.0,
    stop_time: float = -1.0,
) -> float:
    """Largest stable step from convective, viscous and forcing rates.

    The quadratic bound ``dt = 2 cfl / ((c + v) + sqrt((c + v)^2 + 4 f))``
    combines the convective rate ``c``, the explicit viscous rate ``v`` and
    the forcing rate ``f``.
    """

    if cfl <= 0.0:
        raise ValueError(f"cfl must be positive, got {cfl}")
    if romax <= 0.0:
        raise ValueError(f"Maximum density must be positive, got {romax}")

    conv = max(u / h for u, h in zip(umax, cell_size))
    diff = 0.0
    if explicit_diffusion:
        diff = 2.0 * mumax / romax * sum(1.0 / h**2 for h in cell_size)
    forc = sum(abs(g - gp0) / h for g, gp0, h in zip(gravity, gradp0max, cell_size))

    rate = conv + diff
    denom = rate + math.sqrt(rate * rate + 4.0 * forc)
    dt = 2.0 * cfl / denom if denom > 0.0 else max_dt
    dt = min(dt, max_dt)

    if previous_dt is not None and previous_dt > 0.0:
        dt = min(dt, dt_change_max * previous_dt)

    if not steady_state and stop_time > 0.0:
        remaining = stop_time - time
        if remaining > 0.0:
            dt = min(dt, remaining)
    return dt
