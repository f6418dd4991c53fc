"""Block-structured Cartesian level: boxes, halos and reductions."""

from __future__ import annotations

from dataclasses import dataclass
from itertools import product
from typing import Dict, Iterator, List, Sequence, Tuple

import numpy as np

FACES: Dict[str, Tuple[int, int]] = {
    "xmin": (0, 0),
    "xmax": (0, 1),
    "ymin": (1, 0),
    "ymax": (1, 1),
    "zmin": (2, 0),
    "zmax": (2, 1),
}


@dataclass(frozen=True)
class Box:
    """Half-open cell-index box ``[lo, hi)`` in the level index space."""

    lo: Tuple[int, int, int]
    hi: Tuple[int, int, int]

    @property
    def shape(self) -> Tuple[int, int, int]:
        return tuple(h - l for l, h in zip(self.lo, self.hi))

    @property
    def ncells(self) -> int:
        return int(np.prod(self.shape))

    def slices(self, ngrow: int) -> Tuple[slice, slice, slice]:
        return tuple(slice(l + ngrow, h + ngrow) for l, h in zip(self.lo, self.hi))


def _chop(n: int, max_size: int) -> List[Tuple[int, int]]:
    nchunks = -(-n // max_size)
    edges = np.linspace(0, n, nchunks + 1).round().astype(int)
    return [(int(a), int(b)) for a, b in zip(edges[:-1], edges[1:])]


class Mesh:
    """Uniform Cartesian level, stored with a halo of ``ngrow`` cells per side."""

    def __init__(
        self,
        shape: Tuple[int, int, int],
        lengths: Tuple[float, float, float],
        boxes: Sequence[Box],
        periodic: Tuple[bool, bool, bool] = (False, False, False),
        ngrow: int = 2,
        origin: Tuple[float, float, float] = (0.0, 0.0, 0.0),
    ) -> None:
        if len(shape) != 3 or min(shape) <= 0:
            raise ValueError(f"Mesh shape must be three positive extents, got {shape}")
        if ngrow < 2:
            raise ValueError("Mesh needs at least two ghost layers for the viscous stencils")
        covered = sum(box.ncells for box in boxes)
        if covered != int(np.prod(shape)):
            raise ValueError(f"Boxes cover {covered} cells, level has {int(np.prod(shape))}")
        self.shape = tuple(int(n) for n in shape)
        self.lengths = tuple(float(l) for l in lengths)
        self.spacing = tuple(l / n for l, n in zip(self.lengths, self.shape))
        self.boxes = list(boxes)
        self.periodic = tuple(bool(p) for p in periodic)
        self.ngrow = int(ngrow)
        self.origin = tuple(float(o) for o in origin)

    @classmethod
    def structured(
        cls,
        cells: Sequence[int],
        lengths: Sequence[float] = (1.0, 1.0, 1.0),
        max_grid_size: int = 32,
        periodic: Sequence[bool] = (False, False, False),
        ngrow: int = 2,
        origin: Sequence[float] = (0.0, 0.0, 0.0),
    ) -> "Mesh":
        shape = tuple(int(n) for n in cells)
        if len(shape) == 2:
            shape = (*shape, 1)
        lengths = tuple(float(l) for l in lengths)
        if len(lengths) == 2:
            lengths = (*lengths, lengths[0] / shape[0])
        if max_grid_size <= 0:
            raise ValueError("max_grid_size must be positive")
        ranges = [_chop(n, max_grid_size) for n in shape]
        boxes = [
            Box(lo=(xr[0], yr[0], zr[0]), hi=(xr[1], yr[1], zr[1]))
            for xr, yr, zr in product(*ranges)
        ]
        return cls(shape, lengths, boxes, tuple(periodic), ngrow, tuple(origin))

    @property
    def ncells(self) -> int:
        return int(np.prod(self.shape))

    @property
    def padded_shape(self) -> Tuple[int, int, int]:
        return tuple(n + 2 * self.ngrow for n in self.shape)

    def allocate(self, ncomp: int = 1, value: float = 0.0) -> np.ndarray:
        shape = self.padded_shape if ncomp == 1 else (*self.padded_shape, ncomp)
        return np.full(shape, value, dtype=float)

    def region(self, expand: int = 0, shift: Sequence[int] = (0, 0, 0)) -> Tuple[slice, ...]:
        """Slices selecting the valid region grown by ``expand`` and offset by ``shift``."""

        ng = self.ngrow
        if expand + max(abs(s) for s in shift) > ng:
            raise ValueError(f"Stencil reach {expand}+{tuple(shift)} exceeds halo width {ng}")
        return tuple(
            slice(ng - expand + s, ng + n + expand + s) for n, s in zip(self.shape, shift)
        )

    @property
    def interior(self) -> Tuple[slice, ...]:
        return self.region()

    def cell_centers(self) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
        axes = [
            o + (np.arange(n) + 0.5) * h
            for o, n, h in zip(self.origin, self.shape, self.spacing)
        ]
        return tuple(np.meshgrid(*axes, indexing="ij"))

    def ghost_layers(self, face: str) -> Iterator[Tuple[Tuple, Tuple]]:
        """Yield ``(ghost, mirror)`` index tuples, innermost ghost layer first."""

        axis, side = FACES[face]
        ng = self.ngrow
        n = self.shape[axis]
        for layer in range(1, ng + 1):
            if side == 0:
                ghost, mirror = ng - layer, ng + layer - 1
            else:
                ghost, mirror = ng + n - 1 + layer, ng + n - layer
            gidx = [slice(None)] * 3
            midx = [slice(None)] * 3
            gidx[axis] = ghost
            midx[axis] = min(max(mirror, ng), ng + n - 1)
            yield tuple(gidx), tuple(midx)

    def boundary_faces(self) -> List[str]:
        return [face for face, (axis, _) in FACES.items() if not self.periodic[axis]]

    def fill_boundary(self, values: np.ndarray) -> None:
        """Halo exchange: copy periodic images into the ghost layers."""

        for axis, periodic in enumerate(self.periodic):
            if periodic:
                self.fill_periodic(values, axis)

    def fill_periodic(self, values: np.ndarray, axis: int) -> None:
        ng = self.ngrow
        n = self.shape[axis]
        lo_ghost = [slice(None)] * 3
        hi_ghost = [slice(None)] * 3
        lo_src = [slice(None)] * 3
        hi_src = [slice(None)] * 3
        for layer in range(1, ng + 1):
            lo_ghost[axis] = ng - layer
            lo_src[axis] = ng + (n - layer) % n
            hi_ghost[axis] = ng + n - 1 + layer
            hi_src[axis] = ng + (layer - 1) % n
            values[tuple(lo_ghost)] = values[tuple(lo_src)]
            values[tuple(hi_ghost)] = values[tuple(hi_src)]

    def norm0(self, values: np.ndarray, comp: int | None = None) -> float:
        """Global max |x| over valid cells, reduced box by box."""

        local = [
            float(np.max(np.abs(self._box_view(values, box, comp)), initial=0.0))
            for box in self.boxes
        ]
        return max(local, default=0.0)

    def norm1(self, values: np.ndarray, comp: int | None = None) -> float:
        """Global sum |x| over valid cells, reduced box by box."""

        return float(sum(np.sum(np.abs(self._box_view(values, box, comp))) for box in self.boxes))

    def _box_view(self, values: np.ndarray, box: Box, comp: int | None) -> np.ndarray:
        view = values[box.slices(self.ngrow)]
        if comp is not None:
            view = view[..., comp]
        return view
