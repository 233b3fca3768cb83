r"""@package chebsolve.spectral.ultraspherical

Sparse operators of the ultraspherical spectral method.

The unknowns are Chebyshev-T coefficients. Differentiating `k` times maps them
to coefficients in the ultraspherical basis \f$ C^{(k)} \f$. To combine terms
of different derivative order, the lower order terms are converted up to the
highest basis using the (banded) conversion matrices \f$ S_\lambda \f$ which
map \f$ C^{(\lambda)} \f$ coefficients to \f$ C^{(\lambda+1)} \f$ coefficients
(with \f$ C^{(0)} \f$ meaning Chebyshev-T).

See: S. Olver and A. Townsend, "A fast and well-conditioned spectral method",
SIAM Review 55 (2013), 462-489.
"""

import math

import numpy as np
from scipy import sparse
from scipy.linalg import solve_triangular


__all__ = [
    "convert_mat",
    "diff_mat",
    "mult_mat",
]


def _conversion_step(n, lam):
    r"""The single conversion matrix \f$ S_\lambda \f$ of size `n x n`."""
    k = np.arange(n, dtype=float)
    if lam == 0:
        main = 0.5 * np.ones(n)
        main[0] = 1.0
        upper = -0.5 * np.ones(max(n - 2, 0))
    else:
        main = lam / (lam + k)
        upper = -lam / (lam + k[2:])
    if n <= 2:
        return sparse.diags([main], [0], shape=(n, n), format='csr')
    return sparse.diags([main, upper], [0, 2], shape=(n, n), format='csr')


def convert_mat(n, lam, count):
    r"""Conversion from \f$ C^{(\lambda)} \f$ to \f$ C^{(\lambda+count)} \f$.

    The result is the product
    \f$ S_{\lambda+count-1} \cdots S_{\lambda+1} S_\lambda \f$ as a sparse
    `n x n` matrix. For `count == 0`, this is the identity.
    """
    S = sparse.identity(n, format='csr')
    for step in range(count):
        S = _conversion_step(n, lam + step).dot(S)
    return S


def diff_mat(n, k, domain=(-1, 1)):
    r"""Differentiation matrix from Chebyshev-T to \f$ C^{(k)} \f$ coefficients.

    The only nonzero entries are on the `k`-th superdiagonal, given by
    \f$ 2^{k-1}(k-1)!\, j \f$ for the column \f$ j \ge k \f$. The result is
    scaled by \f$ (2/(b-a))^k \f$ for the physical `domain` `(a, b)`.
    """
    if k == 0:
        return sparse.identity(n, format='csr')
    if k >= n:
        return sparse.csr_matrix((n, n))
    a, b = domain
    scl = (2.0 / (b - a))**k
    vals = scl * 2.0**(k-1) * math.factorial(k-1) * np.arange(k, n, dtype=float)
    return sparse.diags([vals], [k], shape=(n, n), format='csr')


def _toeplitz_hankel(coeffs, n):
    r"""Multiplication by a Chebyshev-T series in the Chebyshev-T basis.

    Uses \f$ T_a T_j = (T_{a+j} + T_{|a-j|})/2 \f$.
    """
    M = np.zeros((n, n))
    j = np.arange(n)
    for a, c in enumerate(coeffs):
        if c == 0:
            continue
        upper = a + j
        mask = upper < n
        M[upper[mask], j[mask]] += 0.5 * c
        lower = np.abs(a - j)
        mask = lower < n
        M[lower[mask], j[mask]] += 0.5 * c
    return M


def mult_mat(coeffs, n, lam=0):
    r"""Multiplication by a function in the \f$ C^{(\lambda)} \f$ basis.

    The function is given by its Chebyshev-T coefficients `coeffs`. For
    \f$ \lambda > 0 \f$, the operator is obtained exactly by the similarity
    transform \f$ S M_0 S^{-1} \f$ on a padded size, where `S` converts from
    Chebyshev-T to \f$ C^{(\lambda)} \f$. Since `S` is upper triangular and
    `M_0` has bandwidth `len(coeffs)`, padding to `n + len(coeffs) + 2*lam`
    makes the leading `n x n` block exact.

    @return Dense `n x n` array.
    """
    coeffs = np.trim_zeros(np.atleast_1d(np.asarray(coeffs, dtype=float)), 'b')
    if not coeffs.size:
        return np.zeros((n, n))
    if coeffs.size == 1:
        return coeffs[0] * np.eye(n)
    if lam == 0:
        return _toeplitz_hankel(coeffs, n)
    N = n + coeffs.size + 2 * lam
    M0 = _toeplitz_hankel(coeffs, N)
    S = convert_mat(N, 0, lam).toarray()
    # X S = M0  <=>  S^T X^T = M0^T
    X = solve_triangular(S.T, M0.T, lower=True).T
    return S.dot(X)[:n, :n]

