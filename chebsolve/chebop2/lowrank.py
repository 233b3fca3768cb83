r"""@package chebsolve.chebop2.lowrank

Low rank decomposition of PDE coefficient matrices.

A linear PDE operator with constant coefficients
\f[
    \mathcal{L} = \sum_{i,j} A_{ij}\, \partial_x^i \partial_y^j
\f]
is a sum of \f$ k = \mathrm{rank}(A) \f$ tensor products of ODE operators,
\f$ \mathcal{L} = \sum_{r=1}^k \sigma_r\, \mathcal{L}^y_r \otimes
\mathcal{L}^x_r \f$, obtained from the singular value decomposition of `A`.
Variable coefficients \f$ a_{ij}(x, y) \f$ are split using their own low rank
(CDR) factorisation into sums of products \f$ c(y)\, r(x) \f$.
"""

import numpy as np
from scipy import linalg

from ..spectral.bcs import NDSolveError
from .coeffs import EmptyCoeff, as_coeff


__all__ = [
    "LowRankFactorization",
    "decompose_operator",
    "DegenerateOperatorError",
    "require_rank",
]


class DegenerateOperatorError(NDSolveError):
    r"""Raised when all terms of an operator are numerically zero."""
    pass


class LowRankFactorization(object):
    r"""Rank-`k` factorisation `(U, S, V)` of a PDE coefficient matrix.

    `U` has one row per `y` derivative order and `V` one row per `x`
    derivative order. Column `r` of both describes the r'th ODE operator
    pair. For constant coefficient operators (`dense == True`), `U` and `V`
    are float arrays. Otherwise, they are object arrays of tagged
    coefficients (see coeffs), whose entries are 1-D functions of `y`
    (for `U`) and of `x` (for `V`).
    """

    def __init__(self, U, S, V, dense):
        ## Factor for the `y` direction (`na x k`).
        self.U = U
        ## Diagonal coupling values (length `k`).
        self.S = np.asarray(S, dtype=float)
        ## Factor for the `x` direction (`nb x k`).
        self.V = V
        ## Whether `U` and `V` are plain float arrays.
        self.dense = dense

    @property
    def rank(self):
        return len(self.S)

    def y_terms(self, r):
        r"""Tagged coefficients of the r'th `y` operator, by derivative order."""
        return [as_coeff(c) for c in self.U[:, r]]

    def x_terms(self, r):
        r"""Tagged coefficients of the r'th `x` operator, by derivative order."""
        return [as_coeff(c) for c in self.V[:, r]]

    def parity_splits(self, tol):
        r"""Return `(xsplit, ysplit)` flags of decoupling even/odd subproblems.

        A flag is set if the even or the odd derivative orders in that
        direction are (numerically) absent from all terms. Only constant
        coefficient operators are checked.
        """
        if not self.dense:
            return False, False
        return _parity_split(self.V, tol), _parity_split(self.U, tol)


def _parity_split(F, tol):
    even = np.linalg.norm(F[0::2, :], 2) if F[0::2, :].size else 0.0
    odd = np.linalg.norm(F[1::2, :], 2) if F[1::2, :].size else 0.0
    return min(even, odd) < 10 * tol


def decompose_operator(coeffs, tol):
    r"""Compute the low rank factorisation of a coefficient matrix.

    Args:
        coeffs: Either a float array `A` with `A[i, j]` multiplying
            \f$ \partial_x^i \partial_y^j \f$, or an object array of tagged
            coefficients (see coeffs.coeff_matrix()) with the same indexing.
        tol: Absolute tolerance. Singular values (dense case) and terms
            (variable coefficient case) at or below `tol` are dropped.

    Returns:
        A LowRankFactorization. Its rank may be zero if every term was
        dropped; callers building a discretization must reject that case.
    """
    coeffs = np.asarray(coeffs)
    if coeffs.dtype != object:
        return _decompose_dense(np.asarray(coeffs, dtype=float), tol)
    return _decompose_cells(coeffs, tol)


def _decompose_dense(A, tol):
    U, s, Vh = linalg.svd(A.T)
    rank = int(np.sum(s > tol))
    return LowRankFactorization(U[:, :rank], s[:rank], Vh[:rank, :].T, dense=True)


def _decompose_cells(A, tol):
    nb, na = A.shape
    u_cols = []
    v_cols = []
    for i in range(nb):
        for j in range(na):
            for col, row in as_coeff(A[i, j]).low_rank_terms(tol):
                u = np.empty(na, dtype=object)
                v = np.empty(nb, dtype=object)
                u[:] = [EmptyCoeff()] * na
                v[:] = [EmptyCoeff()] * nb
                u[j] = as_coeff(col)
                v[i] = as_coeff(row)
                u_cols.append(u)
                v_cols.append(v)
    rank = len(u_cols)
    U = np.empty((na, rank), dtype=object)
    V = np.empty((nb, rank), dtype=object)
    for r in range(rank):
        U[:, r] = u_cols[r]
        V[:, r] = v_cols[r]
    return LowRankFactorization(U, np.ones(rank), V, dense=False)


def require_rank(factorization):
    r"""Raise DegenerateOperatorError for rank zero factorizations."""
    if factorization.rank == 0:
        raise DegenerateOperatorError(
            "All terms of the operator are numerically zero; there is no "
            "equation to discretize."
        )
    return factorization
