"""Sparse linear systems for the projection and implicit-diffusion solves."""

from __future__ import annotations

from typing import List, Mapping, Sequence, Tuple

import numpy as np
from scipy import sparse
from scipy.sparse import linalg as splinalg

try:  # Optional dependency for multigrid solves
    import pyamg  # type: ignore
except ImportError:  # pragma: no cover - optional path
    pyamg = None

from .mesh import FACES, Mesh


class SolverError(RuntimeError):
    """A linear solve failed to converge or produced non-finite values."""


KRYLOV = {"cg": splinalg.cg, "bicgstab": splinalg.bicgstab}
METHODS = {"direct", "amg", *KRYLOV}


class FvMatrix:
    """Sparse matrix builder over the valid cells of a level (row-major ``i, j, k``)."""

    def __init__(self, size: int) -> None:
        self.size = int(size)
        self._diag = np.zeros(self.size)
        self._rows: List[np.ndarray] = []
        self._cols: List[np.ndarray] = []
        self._vals: List[np.ndarray] = []
        self._reference: Tuple[int, float] | None = None

    def add_diag(self, cell_ids, coeffs) -> None:
        np.add.at(self._diag, np.asarray(cell_ids).ravel(), np.asarray(coeffs, dtype=float).ravel())

    def add_nb(self, cell_ids, nb_ids, coeffs) -> None:
        rows = np.asarray(cell_ids).ravel()
        cols = np.asarray(nb_ids).ravel()
        vals = np.broadcast_to(np.asarray(coeffs, dtype=float), np.shape(cell_ids)).ravel()
        self._rows.append(rows)
        self._cols.append(cols)
        self._vals.append(vals)

    def set_reference(self, cell_id: int, value: float) -> None:
        """Pin one unknown, keeping the matrix symmetric."""

        self._reference = (int(cell_id), float(value))

    def to_csr(self) -> sparse.csr_matrix:
        n = self.size
        rows = np.concatenate([np.arange(n), *self._rows])
        cols = np.concatenate([np.arange(n), *self._cols])
        vals = np.concatenate([self._diag, *self._vals])
        return sparse.coo_matrix((vals, (rows, cols)), shape=(n, n)).tocsr()

    def system(self, rhs: np.ndarray) -> Tuple[sparse.csr_matrix, np.ndarray]:
        A = self.to_csr()
        b = np.array(rhs, dtype=float).ravel()
        if b.shape[0] != self.size:
            raise ValueError(f"rhs has {b.shape[0]} entries, matrix has {self.size} rows")
        if self._reference is None:
            return A, b
        cell, value = self._reference
        column = A[:, [cell]].toarray().ravel()
        b = b - column * value
        b[cell] = value
        keep = np.ones(self.size)
        keep[cell] = 0.0
        mask = sparse.diags(keep)
        A = (mask @ A @ mask + sparse.diags(1.0 - keep)).tocsr()
        return A, b

    def solve(
        self,
        rhs: np.ndarray,
        method: str = "cg",
        tol: float = 1e-10,
        maxiter: int = 1000,
        return_stats: bool = False,
        initial_guess: np.ndarray | None = None,
    ) -> np.ndarray | tuple[np.ndarray, dict[str, float]]:
        method = method.lower()
        if method not in METHODS:
            raise NotImplementedError(f"Unknown solver method '{method}'")

        A, b = self.system(rhs)
        if initial_guess is None:
            x0 = np.zeros_like(b)
        else:
            x0 = np.array(initial_guess, dtype=float).ravel()
            if self._reference is not None:
                x0[self._reference[0]] = self._reference[1]

        initial_res = float(np.linalg.norm(b - A @ x0))
        b_norm = float(np.linalg.norm(b))
        target = tol * max(b_norm, initial_res)
        if initial_res == 0.0:
            stats = {"initial": 0.0, "final": 0.0, "relative": 0.0, "iterations": 0.0}
            return (x0, stats) if return_stats else x0

        iterations = 0

        def count(_xk) -> None:
            nonlocal iterations
            iterations += 1

        if method == "direct":
            x = np.asarray(splinalg.spsolve(A.tocsc(), b), dtype=float)
            iterations = 1
        elif method == "amg":
            if pyamg is None:  # pragma: no cover - import guard
                raise RuntimeError("AMG solver requested but pyamg is not available.")
            ml = pyamg.smoothed_aggregation_solver(A)
            residuals: List[float] = []
            x = np.asarray(ml.solve(b, x0=x0, tol=tol, maxiter=maxiter, residuals=residuals))
            iterations = len(residuals)
        else:
            diag = A.diagonal()
            inv_diag = np.ones_like(diag)
            nonzero = diag != 0.0
            inv_diag[nonzero] = 1.0 / diag[nonzero]
            x, info = KRYLOV[method](
                A,
                b,
                x0=x0,
                rtol=tol,
                atol=target,
                maxiter=maxiter,
                M=sparse.diags(inv_diag),
                callback=count,
            )
            if info != 0:
                final = float(np.linalg.norm(b - A @ x))
                raise SolverError(
                    f"{method} did not converge (info={info}) after {iterations} iterations: "
                    f"residual {final:.3e}, target {target:.3e}"
                )

        if not np.all(np.isfinite(x)):
            raise SolverError(f"{method} solve produced non-finite values")
        final_res = float(np.linalg.norm(b - A @ x))
        if method in {"direct", "amg"} and final_res > max(target * 10.0, 1e-12):
            raise SolverError(
                f"{method} residual {final_res:.3e} exceeds target {target:.3e}"
            )

        stats = {
            "initial": initial_res,
            "final": final_res,
            "relative": final_res / (b_norm or 1.0),
            "iterations": float(iterations),
        }
        if return_stats:
            return x, stats
        return x


def cell_ids(mesh: Mesh) -> np.ndarray:
    return np.arange(mesh.ncells).reshape(mesh.shape)


def assemble_laplacian(
    mesh: Mesh,
    face_coeffs: Sequence[np.ndarray],
    dirichlet: Mapping[str, float],
) -> Tuple[FvMatrix, np.ndarray]:
    """Assemble ``-div(k grad x)`` on the valid cells.

    ``face_coeffs[axis]`` holds ``k`` on the ``n+1`` faces normal to ``axis``.
    Faces named in ``dirichlet`` reflect about the given face value; the other
    non-periodic faces are zero-flux. Returns the matrix and the boundary part
    of the right-hand side.
    """

    ids = cell_ids(mesh)
    matrix = FvMatrix(mesh.ncells)
    rhs = np.zeros(mesh.shape)
    for axis in range(3):
        n = mesh.shape[axis]
        weight = face_coeffs[axis] / mesh.spacing[axis] ** 2
        if n > 1:
            inner = np.take(weight, range(1, n), axis=axis)
            left = np.take(ids, range(0, n - 1), axis=axis)
            right = np.take(ids, range(1, n), axis=axis)
            _couple(matrix, left, right, inner)
        if mesh.periodic[axis]:
            if n > 1:
                wrap = np.take(weight, [0], axis=axis)
                _couple(
                    matrix,
                    np.take(ids, [n - 1], axis=axis),
                    np.take(ids, [0], axis=axis),
                    wrap,
                )
            continue
        for face, (face_axis, side) in FACES.items():
            if face_axis != axis or face not in dirichlet:
                continue
            layer = 0 if side == 0 else n - 1
            w = np.take(weight, [0 if side == 0 else n], axis=axis)
            cells = np.take(ids, [layer], axis=axis)
            matrix.add_diag(cells, 2.0 * w)
            index = [slice(None)] * 3
            index[axis] = slice(layer, layer + 1)
            rhs[tuple(index)] += 2.0 * w * dirichlet[face]
    return matrix, rhs.ravel()


def _couple(matrix: FvMatrix, left: np.ndarray, right: np.ndarray, weight: np.ndarray) -> None:
    matrix.add_diag(left, weight)
    matrix.add_diag(right, weight)
    matrix.add_nb(left, right, -weight)
    matrix.add_nb(right, left, -weight)

