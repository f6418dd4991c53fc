"""Field diagnostics reported by the integrator."""

from __future__ import annotations

import logging
from typing import Dict, Optional

from ..core import fv_ops
from ..core.bc import BoundaryTable
from ..core.field import FieldStore, ScalarField

logger = logging.getLogger(__name__)


def check_for_nans(store: FieldStore) -> Dict[str, bool]:
    """Warn for every velocity component and pressure holding NaN/Inf."""

    flags = {
        "u": store.velocity.contains_nan(0),
        "v": store.velocity.contains_nan(1),
        "w": store.velocity.contains_nan(2),
        "p": store.pressure.contains_nan(),
    }
    for name, bad in flags.items():
        if bad:
            logger.warning("%s contains NaNs", name)
    return flags


def print_max_vel(store: FieldStore, level: int = 0) -> Dict[str, float]:
    stats = store.max_abs()
    logger.info(
        "max(abs(u/v/w/p)) on level %d: %.6e %.6e %.6e %.6e",
        level,
        stats["u"],
        stats["v"],
        stats["w"],
        stats["p"],
    )
    return stats


def compute_divu(store: FieldStore, boundaries: Optional[BoundaryTable] = None) -> float:
    """Maximum cell divergence of the current velocity."""

    if boundaries is not None:
        boundaries.set_velocity_bcs(store.velocity)
    else:
        store.mesh.fill_boundary(store.velocity.values)
    divu = fv_ops.divergence(store.mesh, store.velocity.values)
    return ScalarField("divu", store.mesh, divu).norm0()
