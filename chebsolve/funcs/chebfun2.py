r"""@package chebsolve.funcs.chebfun2

Functions on rectangles represented by tensor-product Chebyshev series.

A Chebfun2 on the domain `(a, b, c, d)` stores a coefficient matrix
\f$ C \f$ with
\f[
    f(x, y) = \sum_{i,j} C_{ij}\, T_i(t_y(y))\, T_j(t_x(x)),
\f]
i.e. rows correspond to the `y` direction and columns to the `x` direction.
"""

import numbers

import numpy as np
from numpy.polynomial import chebyshev as cheb
from scipy import linalg

from ..numutils import NumericalError
from .chebfun import Chebfun
from . import chebtech


__all__ = [
    "Chebfun2",
    "chebpts2",
    "UnrecognizedTechnologyError",
]


_EPS = np.finfo(float).eps


class UnrecognizedTechnologyError(ValueError):
    r"""Raised when a grid for an unknown spectral technology is requested."""
    pass


def _fourierpts(n, domain):
    r"""Equispaced points of a periodic grid (excluding the right end)."""
    t = np.linspace(-1.0, 1.0, n + 1)[:-1]
    return chebtech.to_physical(t, domain)


def chebpts2(nx, ny=None, domain=(-1, 1, -1, 1), tech='chebtech2'):
    r"""Tensor product grid of points on a rectangle.

    @param nx,ny
        Number of points in `x` and `y` direction. `ny` defaults to `nx`.
    @param domain
        Rectangle `(a, b, c, d)`.
    @param tech
        One of ``'chebtech2'`` (Chebyshev points of the second kind,
        default), ``'chebtech1'`` (first kind) or ``'fourtech'``
        (equispaced periodic points plus the right end point).

    @return Two arrays `(xx, yy)` of shape `(ny, nx)` as returned by
        `numpy.meshgrid`, with ascending coordinates.
    """
    if ny is None:
        ny = nx
    domain = tuple(np.ravel(domain))
    if len(domain) != 4:
        raise ValueError("Unrecognised domain: %s" % (domain,))
    dx, dy = domain[:2], domain[2:]
    if tech == 'chebtech2':
        x = chebtech.chebpts(nx, dx)[::-1]
        y = chebtech.chebpts(ny, dy)[::-1]
    elif tech == 'chebtech1':
        x = chebtech.chebpts1(nx, dx)[::-1]
        y = chebtech.chebpts1(ny, dy)[::-1]
    elif tech == 'fourtech':
        x = np.append(_fourierpts(nx - 1, dx), dx[1])
        y = np.append(_fourierpts(ny - 1, dy), dy[1])
    else:
        raise UnrecognizedTechnologyError("Unrecognized technology: %r" % (tech,))
    return np.meshgrid(x, y)


class Chebfun2(object):
    r"""Bivariate Chebyshev series on a rectangle."""

    def __init__(self, coeffs, domain=(-1, 1, -1, 1)):
        coeffs = np.array(coeffs, dtype=float)
        if coeffs.ndim == 0:
            coeffs = coeffs.reshape(1, 1)
        if coeffs.ndim != 2:
            raise ValueError("Chebfun2 coefficients must form a matrix.")
        ## Coefficient matrix (rows: `y` direction, columns: `x` direction).
        self.coeffs = coeffs
        domain = tuple(float(v) for v in np.ravel(domain))
        if len(domain) != 4 or not (domain[1] > domain[0] and domain[3] > domain[2]):
            raise ValueError("Invalid domain: %s" % (domain,))
        ## Rectangle `(a, b, c, d)` on which the function is defined.
        self.domain = domain

    @property
    def xdomain(self):
        return self.domain[:2]

    @property
    def ydomain(self):
        return self.domain[2:]

    @property
    def shape(self):
        r"""Number of coefficients as `(ny, nx)`."""
        return self.coeffs.shape

    def __repr__(self):
        return "Chebfun2(domain=%s, shape=%s)" % (self.domain, self.shape)

    @classmethod
    def from_function(cls, func, domain=(-1, 1, -1, 1), m=None, n=None,
                      tol=None):
        r"""Construct a Chebfun2 by sampling a vectorized callable `f(x, y)`.

        @param func
            Callable, number or Chebfun2.
        @param domain
            Rectangle `(a, b, c, d)`.
        @param m,n
            Fixed number of samples in `y` and `x` direction. If not given,
            the resolution is increased until both directions are resolved.
        @param tol
            Relative tolerance of the adaptive construction.
        """
        if isinstance(func, Chebfun2):
            return func
        if isinstance(func, numbers.Number):
            return cls(np.array([[float(func)]]), domain)
        if tol is None:
            tol = 100 * _EPS
        if m is not None or n is not None:
            return cls.from_values(cls._sample(func, m or n, n or m, domain), domain)
        ny = nx = 17
        for _ in range(7):
            vals = cls._sample(func, ny, nx, domain)
            coeffs = chebtech.vals2coeffs(chebtech.vals2coeffs(vals, axis=0), axis=1)
            vscale = np.abs(vals).max()
            y_ok = chebtech.is_resolved(coeffs, tol, scale=vscale)
            x_ok = chebtech.is_resolved(coeffs.T, tol, scale=vscale)
            if x_ok and y_ok:
                break
            if not y_ok:
                ny = 2 * ny - 1
            if not x_ok:
                nx = 2 * nx - 1
        cut_y = chebtech.chop_length(coeffs, tol, scale=vscale)
        cut_x = chebtech.chop_length(coeffs.T, tol, scale=vscale)
        return cls(coeffs[:cut_y, :cut_x], domain)

    @staticmethod
    def _sample(func, ny, nx, domain):
        x = chebtech.chebpts(nx, domain[:2])
        y = chebtech.chebpts(ny, domain[2:])
        xx, yy = np.meshgrid(x, y)
        vals = np.asarray(func(xx, yy), dtype=float)
        if vals.shape != xx.shape:
            vals = np.broadcast_to(vals, xx.shape).copy()
        if not np.all(np.isfinite(vals)):
            raise NumericalError("Function returned non-finite values.")
        return vals

    @classmethod
    def from_values(cls, values, domain=(-1, 1, -1, 1)):
        r"""Construct from values on the (descending) Chebyshev grid."""
        coeffs = chebtech.vals2coeffs(chebtech.vals2coeffs(values, axis=0), axis=1)
        return cls(coeffs, domain)

    def __call__(self, x, y):
        r"""Evaluate at points `(x, y)` (broadcasting arrays)."""
        tx = chebtech.to_internal(x, self.xdomain)
        ty = chebtech.to_internal(y, self.ydomain)
        tx, ty = np.broadcast_arrays(tx, ty)
        result = cheb.chebval2d(ty, tx, self.coeffs)
        if np.ndim(result) == 0:
            return float(result)
        return result

    def prolong(self, m, n):
        r"""Return the series truncated or zero-padded to `m x n` terms."""
        coeffs = np.zeros((m, n))
        mm, nn = min(m, self.shape[0]), min(n, self.shape[1])
        coeffs[:mm, :nn] = self.coeffs[:mm, :nn]
        return Chebfun2(coeffs, self.domain)

    def values(self, m=None, n=None):
        r"""Values on a (descending) `m x n` Chebyshev grid."""
        if m is None:
            m = self.shape[0]
        if n is None:
            n = self.shape[1]
        coeffs = self.prolong(m, n).coeffs
        return chebtech.coeffs2vals(chebtech.coeffs2vals(coeffs, axis=0), axis=1)

    def vscale(self):
        r"""Maximum absolute value on a grid of at least `9 x 9` points."""
        m, n = self.shape
        return float(np.abs(self.values(max(m, 9), max(n, 9))).max())

    def diff(self, k=1, axis='x'):
        r"""Partial derivative of order `k` along `axis` (``'x'`` or ``'y'``)."""
        if k == 0:
            return self
        if axis == 'x':
            a, b = self.xdomain
            ax = 1
        elif axis == 'y':
            a, b = self.ydomain
            ax = 0
        else:
            raise ValueError("Unknown axis: %r" % (axis,))
        if self.shape[ax] <= k:
            return Chebfun2(np.zeros((1, 1)), self.domain)
        scl = (2.0 / (b - a))**k
        return Chebfun2(scl * cheb.chebder(self.coeffs, k, axis=ax), self.domain)

    def column(self, x0):
        r"""Restriction `y -> f(x0, y)` as a Chebfun on the `y` interval."""
        tx = chebtech.to_internal(x0, self.xdomain)
        tx_vals = cheb.chebvander(np.array([tx]), self.shape[1] - 1)[0]
        return Chebfun(self.coeffs.dot(tx_vals), self.ydomain)

    def row(self, y0):
        r"""Restriction `x -> f(x, y0)` as a Chebfun on the `x` interval."""
        ty = chebtech.to_internal(y0, self.ydomain)
        ty_vals = cheb.chebvander(np.array([ty]), self.shape[0] - 1)[0]
        return Chebfun(ty_vals.dot(self.coeffs), self.xdomain)

    def cdr(self, tol=None):
        r"""Low rank factorisation \f$ f(x,y) = \sum_k c_k(y) d_k r_k(x) \f$.

        Computed from the singular value decomposition of the coefficient
        matrix. Terms with singular values below `tol` times the largest one
        are dropped.

        @return A triple `(cols, d, rows)` of a list of Chebfun objects in
            `y`, an array of the coupling values and a list of Chebfun
            objects in `x`.
        """
        if tol is None:
            tol = 100 * _EPS
        U, s, Vt = linalg.svd(self.coeffs, full_matrices=False)
        if not s.size or s[0] == 0:
            return [], np.zeros(0), []
        rank = int(np.sum(s > tol * s[0]))
        cols = [Chebfun(U[:, k], self.ydomain) for k in range(rank)]
        rows = [Chebfun(Vt[k, :], self.xdomain) for k in range(rank)]
        return cols, s[:rank], rows

    def _check_domain(self, other):
        if not np.allclose(other.domain, self.domain):
            raise ValueError("Domains %s and %s do not match."
                             % (self.domain, other.domain))

    def __add__(self, other):
        if isinstance(other, numbers.Number):
            coeffs = self.coeffs.copy()
            coeffs[0, 0] += other
            return Chebfun2(coeffs, self.domain)
        if not isinstance(other, Chebfun2):
            return NotImplemented
        self._check_domain(other)
        m = max(self.shape[0], other.shape[0])
        n = max(self.shape[1], other.shape[1])
        return Chebfun2(self.prolong(m, n).coeffs + other.prolong(m, n).coeffs,
                        self.domain)

    __radd__ = __add__

    def __neg__(self):
        return Chebfun2(-self.coeffs, self.domain)

    def __sub__(self, other):
        return self + (-other)

    def __rsub__(self, other):
        return (-self) + other

    def __mul__(self, other):
        if isinstance(other, numbers.Number):
            return Chebfun2(float(other) * self.coeffs, self.domain)
        if not isinstance(other, Chebfun2):
            return NotImplemented
        self._check_domain(other)
        return Chebfun2.from_function(lambda x, y: self(x, y) * other(x, y),
                                      self.domain)

    __rmul__ = __mul__

    def norm(self, p=np.inf):
        r"""Maximum norm (estimated on a dense grid) or Frobenius-type `p=2`."""
        if p == np.inf:
            m, n = self.shape
            return float(np.abs(self.values(max(2*m, 33), max(2*n, 33))).max())
        if p == 2:
            a, b, c, d = self.domain
            sq = self * self
            wy = chebtech.integration_weights(sq.shape[0])
            wx = chebtech.integration_weights(sq.shape[1])
            integral = 0.25 * (b - a) * (d - c) * wy.dot(sq.coeffs).dot(wx)
            return float(np.sqrt(max(0.0, integral)))
        raise NotImplementedError("Norm p=%s not implemented." % (p,))
