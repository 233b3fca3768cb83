r"""@package chebsolve.chebop2.sylvester

Solvers for generalized Sylvester equations \f$ \sum_r A_r X B_r^T = F \f$.

A single term is solved directly, two terms are reduced to a standard
Sylvester equation (solved using the Bartels-Stewart algorithm of SciPy) and
everything else is solved as a sparse Kronecker product system.
"""

import logging

import numpy as np
from scipy import linalg, sparse
from scipy.sparse.linalg import spsolve


__all__ = [
    "solve_matrix_equation",
]


logger = logging.getLogger(__name__)


## Condition number above which the rank 2 reduction is considered unsafe.
MAX_REDUCTION_COND = 1e12


def solve_matrix_equation(terms, rhs):
    r"""Solve \f$ \sum_r A_r X B_r^T = F \f$ for `X`.

    Args:
        terms: List of pairs `(A_r, B_r)` of square matrices.
        rhs: Right hand side `F`.

    Raises:
        numpy.linalg.LinAlgError: If the system is singular.
    """
    F = np.asarray(rhs, dtype=float)
    if len(terms) == 1:
        A, B = terms[0]
        return linalg.solve(B, linalg.solve(A, F).T).T
    if len(terms) == 2:
        X = _solve_rank2(terms, F)
        if X is not None:
            return X
    return _solve_kron(terms, F)


def _solve_rank2(terms, F):
    r"""Reduce a two-term equation to `a X + X b = q` or return `None`."""
    (A1, B1), (A2, B2) = terms
    cond = lambda M: np.linalg.cond(M) if M.size else 1.0
    with np.errstate(divide='ignore', invalid='ignore'):
        first = cond(A2) * cond(B1)
        second = cond(A1) * cond(B2)
    if not min(first, second) < MAX_REDUCTION_COND:
        logger.debug("Rank 2 reduction ill-conditioned (%g, %g).", first, second)
        return None
    if second < first:
        (A1, B1), (A2, B2) = (A2, B2), (A1, B1)
    # A2^-1 A1 X + X (B1^-1 B2)^T = A2^-1 F B1^-T
    try:
        a = linalg.solve(A2, A1)
        b = linalg.solve(B1, B2).T
        q = linalg.solve(B1, linalg.solve(A2, F).T).T
        return linalg.solve_sylvester(a, b, q)
    except (np.linalg.LinAlgError, linalg.LinAlgWarning) as e:
        logger.debug("Rank 2 reduction failed: %s", e)
        return None


def _solve_kron(terms, F):
    r"""Solve the vectorized system \f$ \sum_r (A_r \otimes B_r) x = f \f$."""
    rows, cols = F.shape
    M = sparse.csr_matrix((rows * cols, rows * cols))
    for A, B in terms:
        M = M + sparse.kron(sparse.csr_matrix(A), sparse.csr_matrix(B), format='csr')
    x = spsolve(M.tocsc(), F.ravel())
    x = np.asarray(x, dtype=float)
    if not np.all(np.isfinite(x)):
        raise np.linalg.LinAlgError("Singular matrix equation.")
    return x.reshape(rows, cols)
