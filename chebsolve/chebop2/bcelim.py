r"""@package chebsolve.chebop2.bcelim

Elimination of boundary conditions from matrix equations.

The boundary conditions of one direction form a linear system `B x = g`
acting on the Chebyshev coefficients of that direction. After bringing `B`
into a canonical form whose leading `K x K` block is unit upper triangular,
the first `K` coefficients can be expressed through the remaining ones. This
is used to remove the corresponding columns from the discretized operator
(see zero_dof()) and, after solving the reduced system, to recover the
eliminated coefficients (see recover_solution()).
"""

import warnings

import numpy as np
from scipy import linalg

from ..spectral.bcs import NDSolveError


__all__ = [
    "canonical_bc",
    "nonsingular_permute",
    "zero_dof",
    "check_corners",
    "recover_solution",
    "LinearlyDependentBCsError",
    "BoundaryConditionWarning",
]


_EPS = np.finfo(float).eps


class LinearlyDependentBCsError(NDSolveError):
    r"""Raised when the boundary conditions of a direction are dependent."""
    pass


class BoundaryConditionWarning(UserWarning):
    r"""Issued when boundary conditions disagree at the corners."""
    pass


def nonsingular_permute(B, where="boundary"):
    r"""Find a column permutation making the leading block of `B` invertible.

    The window of `K` consecutive columns (with `K` being the number of
    rows) is moved to the right until it has full rank. The returned index
    array moves that window to the front, keeping the order of the other
    columns.

    Args:
        B: Boundary matrix with one row per condition.
        where: Description of the conditions used in error messages.

    Raises:
        LinearlyDependentBCsError: If no such window exists.
    """
    K, n = B.shape
    if K == 0:
        return np.arange(n)
    k = 0
    while k + K > n or np.linalg.matrix_rank(B[:, k:k+K]) < K:
        k += 1
        if k + K > n:
            raise LinearlyDependentBCsError(
                "BCS are linearly dependent (%s conditions, %d conditions on "
                "%d coefficients)." % (where, K, n)
            )
    return np.concatenate([np.arange(k, k+K), np.arange(k), np.arange(k+K, n)])


def canonical_bc(B, G, where="boundary"):
    r"""Bring boundary conditions `B x = G` into canonical form.

    The columns of `B` are permuted (see nonsingular_permute()), an LU
    decomposition is computed and both sides are transformed such that the
    resulting boundary matrix is upper triangular with unit diagonal.

    @return A triple `(B, G, perm)` of the transformed (and column-permuted)
        boundary matrix, the transformed values and the permutation index
        array, such that `B_new x[perm] = G_new`.
    """
    B = np.asarray(B, dtype=float)
    G = np.asarray(G, dtype=float)
    perm = nonsingular_permute(B, where)
    B = B[:, perm]
    if B.shape[0] == 0:
        return B, G, perm
    p, l, u = linalg.lu(B)
    G = linalg.solve(p.dot(l), G)
    scale = 1.0 / np.diag(u)
    return scale[:, np.newaxis] * u, scale[:, np.newaxis] * G, perm


def zero_dof(C1, C2, E, B, G):
    r"""Eliminate the boundary coupled columns of one factor of a term.

    For the term `C1 X C2^T` of a matrix equation with right hand side `E`
    and canonical boundary conditions `B X = G`, subtract multiples of the
    boundary rows from the rows of `C1` such that its first `K` columns
    vanish. The right hand side is corrected accordingly by
    `c * G[i] C2^T`. Entries with magnitude below `10*eps` are left as they
    are; eliminated entries are set to exactly zero.

    @return The modified copies `(C1, E)`.
    """
    C1 = np.array(C1, dtype=float)
    E = np.array(E, dtype=float)
    C2 = np.asarray(C2)
    for ii in range(B.shape[0]):
        rows = np.nonzero(np.abs(C1[:, ii]) > 10 * _EPS)[0]
        if not rows.size:
            continue
        c = C1[rows, ii]
        C1[rows, :] -= np.outer(c, B[ii, :])
        C1[rows, ii] = 0.0
        E[rows, :] -= np.outer(c, C2.dot(G[ii, :]))
    return C1, E


def check_corners(bcs, vals, tol, factor=100.0):
    r"""Check that the boundary data of adjacent sides agree at the corners.

    Args:
        bcs: Dict mapping the sides ``'left', 'right', 'up', 'down'`` to the
            boundary functionals (one row per condition, acting on the
            coefficients normal to the side).
        vals: Dict with the same keys mapping to the coefficients of the
            prescribed values along the side (one row per condition).
        tol: Tolerance; only data whose last six coefficients are below
            `sqrt(tol)` is compared.
        factor: A BoundaryConditionWarning is issued if the total mismatch
            exceeds `factor * sqrt(tol)`.

    @return The total mismatch.
    """
    total = 0.0
    small = np.sqrt(tol)
    for yside in ('up', 'down'):
        for xside in ('right', 'left'):
            if not (bcs[yside].size and bcs[xside].size):
                continue
            yval, xval = vals[yside], vals[xside]
            if (np.abs(yval[:, -6:]).max() >= small
                    or np.abs(xval[:, -6:]).max() >= small):
                continue
            total += np.linalg.norm(yval.dot(bcs[xside].T) - bcs[yside].dot(xval.T))
    if total >= factor * small:
        warnings.warn("Boundary conditions differ by %1.4f at the corners." % total,
                      BoundaryConditionWarning)
    return total


def recover_solution(Xr, shape, Bx, Gx, By, Gy, perm_x, perm_y):
    r"""Rebuild the full coefficient matrix from the solution of the reduced system.

    Args:
        Xr: Solution of the truncated matrix equation. It is placed at rows
            `Ky, Ky+1, ...` and columns `Kx, Kx+1, ...` of the result;
            coefficients beyond it are zero.
        shape: Shape `(m, n)` of the result.
        Bx, Gx: Canonical `x` conditions, `X Bx^T = Gx^T` (permuted).
        By, Gy: Canonical `y` conditions, `By X = Gy` (permuted).
        perm_x, perm_y: Column permutations returned by canonical_bc().

    @return The `m x n` coefficient matrix in the original ordering.
    """
    m, n = shape
    Kx, Ky = Bx.shape[0], By.shape[0]
    X = np.zeros((m, n))
    rows, cols = Xr.shape
    X[Ky:Ky+rows, Kx:Kx+cols] = Xr
    if Kx:
        rhs = Gx[:, Ky:] - Bx[:, Kx:].dot(X[Ky:, Kx:].T)
        X[Ky:, :Kx] = linalg.solve_triangular(Bx[:, :Kx], rhs).T
    if Ky:
        rhs = Gy - By[:, Ky:].dot(X[Ky:, :])
        X[:Ky, :] = linalg.solve_triangular(By[:, :Ky], rhs)
    result = np.zeros((m, n))
    result[np.ix_(perm_y, perm_x)] = X
    return result
