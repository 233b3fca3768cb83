r"""@package chebsolve.chebop.ad

Local automatic differentiation for linearizing nonlinear operators.

The operator of a boundary value problem is evaluated on ADFun objects
instead of functions. An ADFun carries the values of an expression at the
collocation points of a ChebyBasis together with the linearization of the
expression with respect to the unknown functions. The linearization is stored
as a list of coefficient functions per unknown `j`,
\f[
    \delta F = \sum_j \sum_k c^{(j)}_k(x)\, \partial_x^k \delta u_j,
\f]
which is exactly the form needed to discretize the Frechet derivative as a
linear differential operator. Evaluating an ADFun at a point gives an
ADScalar, whose linearization is a row vector acting on the Chebyshev
coefficients of the unknowns (used for boundary conditions).

Both classes also track whether the expression is nonlinear in the unknowns.
"""

import numbers

import numpy as np

from ..funcs import chebtech
from ..funcs.chebfun import Chebfun
from ..funcs.common import _UfuncMixin


__all__ = [
    "ADFun",
    "ADScalar",
]


## Derivatives of the supported unary ufuncs.
_DERIVATIVES = {
    np.sin: np.cos,
    np.cos: lambda v: -np.sin(v),
    np.tan: lambda v: 1.0 / np.cos(v)**2,
    np.exp: np.exp,
    np.log: lambda v: 1.0 / v,
    np.sqrt: lambda v: 0.5 / np.sqrt(v),
    np.sinh: np.cosh,
    np.cosh: np.sinh,
    np.tanh: lambda v: 1.0 / np.cosh(v)**2,
    np.arctan: lambda v: 1.0 / (1.0 + v**2),
    np.arcsin: lambda v: 1.0 / np.sqrt(1.0 - v**2),
    np.square: lambda v: 2.0 * v,
}


def _scale_jac(jac, factor):
    return dict((var, [factor * c for c in coeffs]) for var, coeffs in jac.items())


def _add_jac(jac1, jac2):
    result = dict((var, list(coeffs)) for var, coeffs in jac1.items())
    for var, coeffs in jac2.items():
        current = result.setdefault(var, [])
        for k, c in enumerate(coeffs):
            if k < len(current):
                current[k] = current[k] + c
            else:
                current.append(c)
    return result


def _add_rows(rows1, rows2):
    result = dict(rows1)
    for var, row in rows2.items():
        result[var] = result[var] + row if var in result else row
    return result


class ADFun(_UfuncMixin):
    r"""Values and linearization of an expression on a collocation grid."""

    def __init__(self, basis, values, jac=None, nonlinear=False):
        ## The ChebyBasis defining the grid.
        self.basis = basis
        ## Values at the collocation points of `basis`.
        self.values = np.asarray(values, dtype=float) * np.ones(basis.num)
        ## Dict mapping the index of an unknown to the list of coefficient
        ## arrays `c_k` of its derivatives.
        self.jac = jac if jac is not None else dict()
        ## Whether the expression is nonlinear in the unknowns.
        self.nonlinear = nonlinear

    @classmethod
    def variable(cls, basis, values, index):
        r"""The unknown number `index` with current values `values`."""
        return cls(basis, values, {index: [np.ones(basis.num)]})

    @classmethod
    def constant(cls, basis, values):
        return cls(basis, values)

    @property
    def depends(self):
        r"""Whether the expression depends on any of the unknowns."""
        return bool(self.jac)

    def __repr__(self):
        return ("ADFun(num=%d, vars=%s, nonlinear=%s)"
                % (self.basis.num, sorted(self.jac), self.nonlinear))

    def _coerce(self, other):
        if isinstance(other, ADFun):
            return other
        if isinstance(other, (numbers.Number, np.ndarray)):
            return ADFun.constant(self.basis, other)
        if isinstance(other, Chebfun):
            return ADFun.constant(self.basis, other(self.basis.pts))
        return None

    def __add__(self, other):
        other = self._coerce(other)
        if other is None:
            return NotImplemented
        return ADFun(self.basis, self.values + other.values,
                     _add_jac(self.jac, other.jac),
                     self.nonlinear or other.nonlinear)

    __radd__ = __add__

    def __neg__(self):
        return ADFun(self.basis, -self.values, _scale_jac(self.jac, -1.0),
                     self.nonlinear)

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
        other = self._coerce(other)
        if other is None:
            return NotImplemented
        jac = _add_jac(_scale_jac(self.jac, other.values),
                       _scale_jac(other.jac, self.values))
        nonlinear = (self.nonlinear or other.nonlinear
                     or (self.depends and other.depends))
        return ADFun(self.basis, self.values * other.values, jac, nonlinear)

    __rmul__ = __mul__

    def reciprocal(self):
        r"""Return the ADFun of `1/self`."""
        v = self.values
        return ADFun(self.basis, 1.0 / v, _scale_jac(self.jac, -1.0 / v**2),
                     self.nonlinear or self.depends)

    def __truediv__(self, other):
        other = self._coerce(other)
        if other is None:
            return NotImplemented
        return self * other.reciprocal()

    def __rtruediv__(self, other):
        other = self._coerce(other)
        if other is None:
            return NotImplemented
        return other * self.reciprocal()

    def __pow__(self, p):
        if not isinstance(p, numbers.Number):
            return NotImplemented
        if p == 0:
            return ADFun.constant(self.basis, 1.0)
        if p == 1:
            return self
        v = self.values
        return ADFun(self.basis, v**p, _scale_jac(self.jac, p * v**(p-1)),
                     self.nonlinear or self.depends)

    def _apply_ufunc(self, ufunc):
        try:
            deriv = _DERIVATIVES[ufunc]
        except KeyError:
            return NotImplemented
        v = self.values
        return ADFun(self.basis, ufunc(v), _scale_jac(self.jac, deriv(v)),
                     self.nonlinear or self.depends)

    def diff(self, k=1):
        r"""Return the `k`-th derivative w.r.t. the independent variable."""
        result = self
        for _ in range(k):
            result = result._diff1()
        return result

    def _diff1(self):
        D = self.basis.value_diff_mat()
        jac = dict()
        for var, coeffs in self.jac.items():
            new = [np.zeros(self.basis.num) for _ in range(len(coeffs) + 1)]
            for k, c in enumerate(coeffs):
                if np.ptp(c) != 0:
                    new[k] = new[k] + D.dot(c)
                new[k+1] = new[k+1] + c
            jac[var] = new
        return ADFun(self.basis, D.dot(self.values), jac, self.nonlinear)

    def __call__(self, x):
        r"""Evaluate at the point `x`, returning an ADScalar."""
        basis = self.basis
        interp = basis.interpolation_row(x)
        t = float(basis.transform(x, back=True))
        rows = dict()
        for var, coeffs in self.jac.items():
            row = np.zeros(basis.num)
            for k, c in enumerate(coeffs):
                factor = interp.dot(c)
                if factor != 0:
                    row += factor * basis.evaluate_all_at(t, k)
            rows[var] = row
        return ADScalar(float(interp.dot(self.values)), rows, self.nonlinear)

    def sum(self):
        r"""Definite integral over the domain as an ADScalar."""
        basis = self.basis
        a, b = basis.domain
        weights = 0.5 * (b - a) * chebtech.integration_weights(basis.num).dot(
            basis.vals2coeffs_mat()
        )
        rows = dict()
        for var, coeffs in self.jac.items():
            row = np.zeros(basis.num)
            for k, c in enumerate(coeffs):
                if np.any(c):
                    row += (weights * c).dot(basis.deriv_mat(k))
            rows[var] = row
        return ADScalar(float(weights.dot(self.values)), rows, self.nonlinear)

    def order(self, var):
        r"""Highest derivative order of unknown `var` (`-1` if absent)."""
        coeffs = self.jac.get(var, [])
        nonzero = [k for k, c in enumerate(coeffs) if np.any(c)]
        return max(nonzero) if nonzero else -1


class ADScalar(_UfuncMixin):
    r"""Value and linearization of a scalar functional of the unknowns.

    The linearization is stored as a dict mapping the index of an unknown to
    a row vector acting on its Chebyshev coefficients.
    """

    def __init__(self, value, rows=None, nonlinear=False):
        ## Current value of the functional.
        self.value = float(value)
        ## Linearization rows per unknown.
        self.rows = rows if rows is not None else dict()
        ## Whether the functional is nonlinear in the unknowns.
        self.nonlinear = nonlinear

    @property
    def depends(self):
        return bool(self.rows)

    def __repr__(self):
        return "ADScalar(%r, vars=%s)" % (self.value, sorted(self.rows))

    @staticmethod
    def _coerce(other):
        if isinstance(other, ADScalar):
            return other
        if isinstance(other, numbers.Number):
            return ADScalar(other)
        return None

    def _scaled(self, factor, value, nonlinear):
        rows = dict((var, factor * row) for var, row in self.rows.items())
        return ADScalar(value, rows, nonlinear)

    def __add__(self, other):
        other = self._coerce(other)
        if other is None:
            return NotImplemented
        return ADScalar(self.value + other.value, _add_rows(self.rows, other.rows),
                        self.nonlinear or other.nonlinear)

    __radd__ = __add__

    def __neg__(self):
        return self._scaled(-1.0, -self.value, self.nonlinear)

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
        other = self._coerce(other)
        if other is None:
            return NotImplemented
        a = self._scaled(other.value, 0.0, False)
        b = other._scaled(self.value, 0.0, False)
        nonlinear = (self.nonlinear or other.nonlinear
                     or (self.depends and other.depends))
        return ADScalar(self.value * other.value, _add_rows(a.rows, b.rows),
                        nonlinear)

    __rmul__ = __mul__

    def reciprocal(self):
        v = self.value
        return self._scaled(-1.0 / v**2, 1.0 / v, self.nonlinear or self.depends)

    def __truediv__(self, other):
        other = self._coerce(other)
        if other is None:
            return NotImplemented
        return self * other.reciprocal()

    def __rtruediv__(self, other):
        other = self._coerce(other)
        if other is None:
            return NotImplemented
        return other * self.reciprocal()

    def __pow__(self, p):
        if not isinstance(p, numbers.Number):
            return NotImplemented
        if p == 0:
            return ADScalar(1.0)
        if p == 1:
            return self
        v = self.value
        return self._scaled(p * v**(p-1), v**p, self.nonlinear or self.depends)

    def _apply_ufunc(self, ufunc):
        try:
            deriv = _DERIVATIVES[ufunc]
        except KeyError:
            return NotImplemented
        v = self.value
        return self._scaled(float(deriv(v)), float(ufunc(v)),
                            self.nonlinear or self.depends)
