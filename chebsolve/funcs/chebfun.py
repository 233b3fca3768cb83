r"""@package chebsolve.funcs.chebfun

One-dimensional functions represented by Chebyshev series.

A Chebfun stores the coefficients \f$ c_k \f$ of
\f[
    f(x) = \sum_{k=0}^{n-1} c_k T_k(t(x)),
\f]
where \f$ t(x) \f$ maps the physical domain `[a, b]` linearly onto
`[-1, 1]`.

@b Examples

```
    f = Chebfun.from_function(lambda x: np.exp(np.sin(x)), domain=(0, 3))
    df = f.diff()
    print(f(1.5), df(1.5), f.sum())
```
"""

import numbers

import numpy as np
from numpy.polynomial import chebyshev as cheb

from ..numutils import NumericalError
from .common import _UfuncMixin
from . import chebtech


__all__ = [
    "Chebfun",
    "diff",
]


_EPS = np.finfo(float).eps


def diff(f, k=1, *args, **kwargs):
    r"""Return the `k`-th derivative of a function object.

    This simply calls `f.diff(k, ...)` and works for Chebfun, Chebfun2 and
    the linearization objects used by the BVP solver.
    """
    return f.diff(k, *args, **kwargs)


def sample_function(func, x):
    r"""Evaluate a (possibly scalar valued) callable on an array of points.

    Callables returning a single number are broadcast to the shape of `x`.
    """
    values = np.asarray(func(x), dtype=float)
    if values.shape != np.shape(x):
        values = np.broadcast_to(values, np.shape(x)).copy()
    if not np.all(np.isfinite(values)):
        raise NumericalError("Function returned non-finite values.")
    return values


class Chebfun(_UfuncMixin):
    r"""Chebyshev series on an interval.

    Instances should be treated as immutable values. All operations return
    new objects.
    """

    def __init__(self, coeffs, domain=(-1, 1)):
        r"""Create a Chebfun from its Chebyshev coefficients.

        @param coeffs
            Iterable of Chebyshev coefficients. An empty iterable is treated
            as the zero function.
        @param domain
            Interval `(a, b)` on which the function lives.
        """
        coeffs = np.atleast_1d(np.array(coeffs, dtype=float))
        if coeffs.ndim != 1:
            raise ValueError("Chebfun coefficients must be one-dimensional.")
        if not coeffs.size:
            coeffs = np.zeros(1)
        ## Chebyshev coefficients of the function.
        self.coeffs = coeffs
        a, b = map(float, domain)
        if not b > a:
            raise ValueError("Invalid domain: %s" % (domain,))
        ## Interval on which the function is defined.
        self.domain = (a, b)

    @classmethod
    def from_function(cls, func, domain=(-1, 1), num=None, tol=None):
        r"""Construct a Chebfun by sampling a callable.

        @param func
            Vectorized callable `f(x)` or a number (constant function).
        @param domain
            Interval `(a, b)` to sample `func` on.
        @param num
            Fixed number of sample points. If not given (default), the number
            of points is doubled until the series is resolved to `tol`.
        @param tol
            Relative tolerance for the adaptive construction. Default is
            `100` times machine epsilon.
        """
        if isinstance(func, Chebfun):
            return func
        if isinstance(func, numbers.Number):
            return cls.constant(func, domain)
        if num is not None:
            return cls.from_values(sample_function(func, chebtech.chebpts(num, domain)),
                                   domain)
        if tol is None:
            tol = 100 * _EPS
        for k in range(4, 17):
            n = 2**k + 1
            values = sample_function(func, chebtech.chebpts(n, domain))
            coeffs = chebtech.vals2coeffs(values)
            vscale = np.abs(values).max()
            if chebtech.is_resolved(coeffs, tol, scale=vscale):
                cut = chebtech.chop_length(coeffs, tol, scale=vscale)
                return cls(coeffs[:cut], domain)
        return cls(coeffs, domain)

    @classmethod
    def from_values(cls, values, domain=(-1, 1)):
        r"""Construct a Chebfun from values at chebtech.chebpts()."""
        return cls(chebtech.vals2coeffs(values), domain)

    @classmethod
    def constant(cls, value, domain=(-1, 1)):
        r"""Construct a constant function."""
        return cls([float(value)], domain)

    @classmethod
    def identity(cls, domain=(-1, 1)):
        r"""Construct the function `f(x) = x` on the given domain."""
        a, b = domain
        return cls([0.5 * (a + b), 0.5 * (b - a)], domain)

    def __len__(self):
        return len(self.coeffs)

    def __repr__(self):
        return "Chebfun(domain=%s, length=%d)" % (self.domain, len(self))

    def copy(self):
        r"""Return an independent copy of this function."""
        return Chebfun(self.coeffs.copy(), self.domain)

    def __call__(self, x):
        r"""Evaluate the function at a point or an array of points."""
        t = chebtech.to_internal(x, self.domain)
        result = cheb.chebval(t, self.coeffs)
        if np.ndim(result) == 0:
            return float(result)
        return result

    @property
    def points(self):
        r"""Chebyshev points matching the current length."""
        return chebtech.chebpts(len(self), self.domain)

    def values(self, num=None):
        r"""Values at `num` Chebyshev points (default: current length)."""
        if num is None:
            num = len(self)
        return chebtech.coeffs2vals(self.prolong(num).coeffs)

    def prolong(self, num):
        r"""Return the series truncated or zero-padded to `num` terms."""
        coeffs = np.zeros(num)
        n = min(num, len(self))
        coeffs[:n] = self.coeffs[:n]
        return Chebfun(coeffs, self.domain)

    def simplify(self, tol=None):
        r"""Remove negligible trailing coefficients."""
        if tol is None:
            tol = 100 * _EPS
        cut = chebtech.chop_length(self.coeffs, tol)
        return Chebfun(self.coeffs[:cut], self.domain)

    def vscale(self):
        r"""Estimate of the maximum absolute value of the function."""
        return float(np.abs(self.values(max(len(self), 9))).max())

    def diff(self, k=1):
        r"""Return the `k`-th derivative."""
        if k == 0:
            return self
        if len(self) <= k:
            return Chebfun([0.0], self.domain)
        a, b = self.domain
        scl = (2.0 / (b - a))**k
        return Chebfun(scl * cheb.chebder(self.coeffs, k), self.domain)

    def sum(self):
        r"""Definite integral over the domain."""
        a, b = self.domain
        w = chebtech.integration_weights(len(self))
        return 0.5 * (b - a) * float(np.dot(w, self.coeffs))

    def norm(self, p=2):
        r"""Norm of the function.

        @param p
            Either `2` (default) for the \f$ L^2 \f$ norm or `np.inf` for the
            maximum norm (estimated on a dense Chebyshev grid).
        """
        if p == 2:
            return float(np.sqrt(max(0.0, (self * self).sum())))
        if p == np.inf:
            num = max(4 * len(self), 33)
            return float(np.abs(self.values(num)).max())
        raise NotImplementedError("Norm p=%s not implemented." % (p,))

    def compose(self, func):
        r"""Return the Chebfun of `func(self(x))`, constructed adaptively."""
        return Chebfun.from_function(lambda x: func(self(x)), self.domain)

    def _apply_ufunc(self, ufunc):
        return self.compose(ufunc)

    def _coerce(self, other):
        if isinstance(other, Chebfun):
            if not np.allclose(other.domain, self.domain):
                raise ValueError("Domains %s and %s do not match."
                                 % (self.domain, other.domain))
            return other
        if isinstance(other, numbers.Number):
            return Chebfun.constant(other, self.domain)
        return None

    def __add__(self, other):
        other = self._coerce(other)
        if other is None:
            return NotImplemented
        n = max(len(self), len(other))
        return Chebfun(self.prolong(n).coeffs + other.prolong(n).coeffs,
                       self.domain)

    __radd__ = __add__

    def __neg__(self):
        return Chebfun(-self.coeffs, self.domain)

    def __pos__(self):
        return self

    def __sub__(self, other):
        other = self._coerce(other)
        if other is None:
            return NotImplemented
        return self + (-other)

    def __rsub__(self, other):
        other = self._coerce(other)
        if other is None:
            return NotImplemented
        return other + (-self)

    def __mul__(self, other):
        if isinstance(other, numbers.Number):
            return Chebfun(float(other) * self.coeffs, self.domain)
        other = self._coerce(other)
        if other is None:
            return NotImplemented
        coeffs = cheb.chebmul(self.coeffs, other.coeffs)
        return Chebfun(coeffs, self.domain).simplify(tol=_EPS)

    __rmul__ = __mul__

    def __truediv__(self, other):
        if isinstance(other, numbers.Number):
            return Chebfun(self.coeffs / float(other), self.domain)
        other = self._coerce(other)
        if other is None:
            return NotImplemented
        return Chebfun.from_function(lambda x: self(x) / other(x), self.domain)

    def __rtruediv__(self, other):
        other = self._coerce(other)
        if other is None:
            return NotImplemented
        return other / self

    def __pow__(self, p):
        if not isinstance(p, numbers.Number):
            return NotImplemented
        if p == int(p) and 0 <= p <= 8:
            coeffs = cheb.chebpow(self.coeffs, int(p))
            return Chebfun(coeffs, self.domain).simplify(tol=_EPS)
        return self.compose(lambda v: v**p)
