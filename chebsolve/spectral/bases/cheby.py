r"""@package chebsolve.spectral.bases.cheby

Chebyshev polynomial basis for the collocation discretization.

The unknowns are the Chebyshev coefficients of the solution. Collocation
takes place at the Gauss-Lobatto points (in descending order, as produced by
funcs.chebtech.chebpts()).
"""

import numpy as np
from numpy.polynomial import chebyshev as cheb

from ...funcs import chebtech
from ...funcs.chebfun import Chebfun
from .base import _SpectralBasis


__all__ = [
    "ChebyBasis",
]


class ChebyBasis(_SpectralBasis):
    r"""Pseudospectral basis set of Chebyshev polynomials."""
    def __init__(self, domain, num):
        super(ChebyBasis, self).__init__(domain=domain, num=num)
        self._Tderiv = dict()
        self._vals2coeffs = None
        self._value_diff_mat = None

    def internal_domain(self):
        return (-1.0, 1.0)

    def _collocation_points(self):
        return chebtech.chebpts(self._num)

    def solution_function(self, sol_coeffs):
        return Chebfun(sol_coeffs, self.domain)

    def Tderiv(self, n):
        r"""Coefficients of the n'th derivatives of the first `num` Chebyshev polynomials.

        The result is a matrix whose column `k` contains the Chebyshev
        coefficients of \f$ T_k^{(n)} \f$ (w.r.t. the internal domain).
        """
        if n not in self._Tderiv:
            eye = np.eye(self._num)
            if n == 0:
                self._Tderiv[n] = eye
            else:
                self._Tderiv[n] = cheb.chebder(eye, n) if n < self._num \
                    else np.zeros((1, self._num))
        return self._Tderiv[n]

    def evaluate_all_at(self, x, n=0):
        x = float(x)
        s = self._scl**n
        if abs(abs(x) - 1.0) < 1e-15:
            return s * np.array([chebtech.endpoint_derivative(k, n, right=x > 0)
                                 for k in range(self._num)])
        return s * cheb.chebval(x, self.Tderiv(n))

    def _compute_deriv_mat(self, n):
        if n == 0:
            return np.cos(np.outer(np.arccos(np.clip(self.pts_internal, -1, 1)),
                                   np.arange(self._num)))
        rows = [self.evaluate_all_at(x, n) for x in self.pts_internal[[0, -1]]]
        M = self._scl**n * cheb.chebval(self.pts_internal, self.Tderiv(n)).T
        M[0], M[-1] = rows
        return M

    def vals2coeffs_mat(self):
        r"""Matrix mapping values at the collocation points to coefficients."""
        if self._vals2coeffs is None:
            self._vals2coeffs = chebtech.vals2coeffs(np.eye(self._num))
        return self._vals2coeffs

    def value_diff_mat(self):
        r"""Differentiation matrix acting on values at the collocation points."""
        if self._value_diff_mat is None:
            self._value_diff_mat = self.deriv_mat(1).dot(self.vals2coeffs_mat())
        return self._value_diff_mat

    def interpolation_row(self, x):
        r"""Row vector mapping values at the collocation points to the value at `x`.

        The point `x` is given in the physical domain.
        """
        t = self.transform(x, back=True)
        return self.evaluate_all_at(t, 0).dot(self.vals2coeffs_mat())
