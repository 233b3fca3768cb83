r"""@package chebsolve.funcs.chebtech

Low level tools for Chebyshev series on a single interval.

All grids used here are Chebyshev points of the second kind (Gauss-Lobatto
points) in *descending* order, i.e. \f$ x_k = \cos(k\pi/(n-1)) \f$ for
\f$ k = 0, \ldots, n-1 \f$, mapped to the physical domain. With this ordering,
the transforms between values and coefficients are a type-I discrete cosine
transform.
"""

import numpy as np
from scipy.fft import dct
from mpmath import mp


__all__ = [
    "chebpts",
    "chebpts1",
    "to_internal",
    "to_physical",
    "vals2coeffs",
    "coeffs2vals",
    "chop_length",
    "is_resolved",
    "endpoint_derivative",
    "integration_weights",
]


def to_internal(x, domain):
    r"""Map points from the physical `domain` to `[-1, 1]`."""
    a, b = domain
    return (2.0 * np.asarray(x, dtype=float) - (a + b)) / (b - a)


def to_physical(t, domain):
    r"""Map points from `[-1, 1]` to the physical `domain`."""
    a, b = domain
    return 0.5 * (b - a) * (np.asarray(t, dtype=float) + 1.0) + a


def chebpts(n, domain=(-1, 1)):
    r"""Return `n` Chebyshev points of the second kind (descending)."""
    if n == 1:
        return to_physical(np.zeros(1), domain)
    t = np.cos(np.pi * np.arange(n) / (n - 1))
    return to_physical(t, domain)


def chebpts1(n, domain=(-1, 1)):
    r"""Return `n` Chebyshev points of the first kind (descending)."""
    t = np.cos(np.pi * (2 * np.arange(n) + 1) / (2.0 * n))
    return to_physical(t, domain)


def vals2coeffs(values, axis=0):
    r"""Convert values at chebpts() to Chebyshev coefficients.

    The discrete Chebyshev transform is given by
    \f[
        c_k = \frac{\gamma_k}{N}\left[u_0 + (-1)^k u_N
              + 2\sum_{i=1}^{N-1} u_i \cos\frac{k\pi i}{N} \right],
    \f]
    where \f$ \gamma_k = 1/2 \f$ for \f$ k = 0, N \f$ and
    \f$ \gamma_k = 1 \f$ otherwise.
    """
    values = np.asarray(values, dtype=float)
    n = values.shape[axis]
    if n == 1:
        return values.copy()
    c = dct(values, type=1, axis=axis) / (n - 1)
    c = np.moveaxis(c, axis, 0)
    c[0] /= 2
    c[-1] /= 2
    return np.moveaxis(c, 0, axis)


def coeffs2vals(coeffs, axis=0):
    r"""Evaluate a Chebyshev series at chebpts() of the same length."""
    coeffs = np.array(coeffs, dtype=float)
    n = coeffs.shape[axis]
    if n == 1:
        return coeffs
    c = np.moveaxis(coeffs, axis, 0)
    c[1:-1] /= 2
    return dct(np.moveaxis(c, 0, axis), type=1, axis=axis)


def chop_length(coeffs, tol, scale=None):
    r"""Return the number of leading coefficients exceeding a tolerance.

    Trailing coefficients with magnitude below `tol * scale` are considered
    negligible. `scale` defaults to the largest coefficient. At least one
    coefficient is always kept.
    """
    coeffs = np.abs(np.asarray(coeffs, dtype=float))
    if coeffs.ndim > 1:
        coeffs = coeffs.max(axis=tuple(range(1, coeffs.ndim)))
    if scale is None:
        scale = coeffs.max() if coeffs.size else 0.0
    big = np.nonzero(coeffs > tol * scale)[0]
    if not big.size:
        return 1
    return int(big[-1]) + 1


def is_resolved(coeffs, tol, scale=None, tail=None):
    r"""Return whether a Chebyshev series has decayed to `tol`.

    The last `tail` coefficients (by default an eighth of the series, but at
    least two) must be below `tol * scale`, where `scale` defaults to the
    largest coefficient.
    """
    coeffs = np.abs(np.asarray(coeffs, dtype=float))
    if coeffs.ndim > 1:
        coeffs = coeffs.max(axis=tuple(range(1, coeffs.ndim)))
    n = len(coeffs)
    biggest = coeffs.max() if n else 0.0
    if scale is None:
        scale = biggest
    scale = max(scale, biggest)
    if scale == 0:
        return True
    if tail is None:
        tail = max(2, n // 8)
    if n <= tail:
        return False
    return coeffs[-tail:].max() <= tol * scale


def endpoint_derivative(k, n, right=True):
    r"""Value of the n'th derivative of \f$ T_k \f$ at `1` (or `-1`).

    Uses
    \f[
        T_k^{(n)}(\pm 1) = (\pm 1)^{k+n}
            \prod_{p=0}^{n-1} \frac{k^2 - p^2}{2p+1},
    \f]
    computed with `mpmath` to avoid cancellation in the product.
    """
    pos = mp.fprod([mp.mpf(k**2 - p**2) / (2*p + 1) for p in range(n)])
    if right:
        return float(pos)
    return float((-1)**(k+n) * pos)


def integration_weights(n):
    r"""Integrals of \f$ T_0, \ldots, T_{n-1} \f$ over `[-1, 1]`."""
    k = np.arange(n)
    w = np.zeros(n)
    even = k % 2 == 0
    w[even] = 2.0 / (1.0 - k[even]**2)
    return w
