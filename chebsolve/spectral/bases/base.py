r"""@package chebsolve.spectral.bases.base

Base class for collocation bases.

The _SpectralBasis class already does much of the work of e.g. composing the
operator matrix from sampled coefficient functions.
"""

from abc import ABCMeta, abstractmethod

import numpy as np


__all__ = []


class _SpectralBasis(metaclass=ABCMeta):
    r"""Abstract basis class for pseudospectral bases.

    Sub classes should implement the following methods:
        * internal_domain() returning the native domain of the basis
        * _collocation_points() computing the collocation points in the native
          domain
        * _compute_deriv_mat() computing the matrix we get by evaluating all
          (derivatives of the) basis functions at all collocation points
        * solution_function() constructing the solution from a set of
          coefficients
        * evaluate_all_at() evaluating all (derivatives of the) basis
          functions at a given point
    """
    def __init__(self, domain, num):
        ## Physical domain of the problem.
        self._domain = tuple(float(v) for v in domain)
        ## Number of basis functions to include (\ie resolution).
        self._num = num
        ## Cached derivative matrices.
        self._deriv_mats = dict()
        ## The collocation points in the basis' native domain.
        self._pts_internal = self._collocation_points()
        ## The collocation points mapped to the physical domain.
        self._pts = self.transform(self._pts_internal)
        a, b = self.internal_domain()
        c, d = self._domain
        ## Scaling to apply due to derivatives being taken in the native
        ## domain instead of the physical one.
        self._scl = (b-a)/(d-c)

    def transform(self, x, back=False):
        r"""Transform points between the physical and native/internal domain.

        Args:
            back: Whether to transform back from the physical to the native
                domain. Default is `False`, i.e. we transform from the native
                internal domain to the physical domain.
        """
        a, b = self.internal_domain()
        c, d = self._domain
        if back:
            a, b, c, d = c, d, a, b
        x = np.asarray(x, dtype=float)
        return c + (x - a) * (d - c) / (b - a)

    @property
    def pts(self):
        r"""All collocation points on the physical domain."""
        return self._pts

    @property
    def pts_internal(self):
        r"""All collocation points on the internal domain."""
        return self._pts_internal

    @property
    def num(self):
        r"""Number of basis functions after which to truncate the expansion.

        This is the same number as the number of collocation points.
        """
        return self._num

    @property
    def domain(self):
        r"""Physical domain of the basis."""
        return self._domain

    @abstractmethod
    def internal_domain(self):
        r"""Return the internal domain of the basis set."""
        pass

    @abstractmethod
    def _collocation_points(self):
        r"""Compute the collocation points on the internal (native) domain."""
        pass

    @abstractmethod
    def _compute_deriv_mat(self, n):
        r"""Compute the n'th derivative of all basis functions at all collocation points.

        Rows of the matrix should correspond to different collocation points
        and columns to the different basis functions.
        """
        pass

    @abstractmethod
    def solution_function(self, sol_coeffs):
        r"""Construct the solution function from a given set of coefficients."""
        pass

    @abstractmethod
    def evaluate_all_at(self, x, n=0):
        """Evaluate n'th derivative of all basis functions at x.

        The result is an array of `num` values.

        Args:
            x: Point (in the internal domain) at which to evaluate all basis
                functions.
            n: Derivative order of the basis functions to use.
        """
        pass

    def sample_operator_func(self, func):
        r"""Sample the given function at all collocation points.

        The collocation points will be those in the physical domain. Numbers
        are broadcast to constant arrays.
        """
        if callable(func):
            return np.asarray(func(self.pts), dtype=float) * np.ones(self._num)
        return np.asarray(func, dtype=float) * np.ones(self._num)

    def construct_operator_matrix(self, op):
        r"""Compute the operator matrix for the given differential operator.

        This matrix, `L`, is defined as the matrix that results from applying
        the differential operator of the given problem to the matrix `M`
        consisting of the basis functions evaluated at the collocation
        points, i.e. \f[
            M_{ij} = \phi_j(x_i),
        \f]
        where \f$\phi_j\f$ is the j'th basis function and \f$x_i\f$ the i'th
        collocation point.

        The differential operator is given by a list of coefficients `op`,
        where the elements correspond to the different values of `n` used for
        calling deriv_mat():

        \code{.unparsed}
        op[0]: multiplies the function phi(x) itself
        op[1]: multiplies phi'(x)
        op[2]: multiplies phi''(x)
        ...
        \endcode

        Each element may be a number, a callable or an array of values at the
        collocation points.
        """
        L = np.zeros((self._num, self._num))
        for n, coeff in enumerate(op):
            if coeff is None:
                continue
            values = self.sample_operator_func(coeff)
            if not np.any(values):
                continue
            L += values[:, np.newaxis] * self.deriv_mat(n)
        return L

    def deriv_mat(self, n):
        r"""Return derivative matrix of derivative order `n`."""
        try:
            return self._deriv_mats[n]
        except KeyError:
            M = self._compute_deriv_mat(n)
            self._deriv_mats[n] = M
            return M
