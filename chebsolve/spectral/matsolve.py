r"""@package chebsolve.spectral.matsolve

Dense linear solvers used by the discretizations.
"""

import numpy as np
from scipy import linalg
from mpmath import mp


__all__ = [
    "mat_solve",
]


def mat_solve(A, b, method='scipy.solve'):
    r"""Solve A x = b for x using the chosen solving method.

    Args:
        A: Matrix as a NumPy array.
        b: Right hand side (vector or matrix with one column per system).
        method: One of
            * `"scipy.solve"` (default, LU decomposition),
            * `"scipy.lstsq"` (least squares, also for non-square `A`),
            * `"mp.lu_solve"` (arbitrary precision LU decomposition using
              `mpmath` at the current `mp.dps`; slow, for testing).
            Non-square systems are always solved with `"scipy.lstsq"`.
    """
    A = np.asarray(A, dtype=np.float64)
    b = np.asarray(b, dtype=np.float64)
    if A.shape[0] != A.shape[1]:
        method = 'scipy.lstsq'
    if method == 'mp.lu_solve':
        if b.ndim > 1:
            return np.column_stack([mat_solve(A, col, method) for col in b.T])
        x = mp.lu_solve(mp.matrix(A.tolist()), mp.matrix(b.tolist()))
        return np.array([float(v) for v in x])
    if method == 'scipy.solve':
        return linalg.solve(A, b)
    if method == 'scipy.lstsq':
        x, _residues, _rank, _sigma = linalg.lstsq(A, b)
        return x
    raise NotImplementedError("Solver method '%s' not implemented." % method)
