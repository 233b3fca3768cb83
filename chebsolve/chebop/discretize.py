r"""@package chebsolve.chebop.discretize

Discretizations of linearized boundary value problems.

Two discretizations are available:
    * CollocationDiscretization: rectangular collocation at the Chebyshev
      points. For each equation of order `d`, `d` collocation rows are
      removed (alternating between the ends of the interval) and replaced
      by the boundary condition rows.
    * UltrasphericalDiscretization: the ultraspherical spectral method (see
      spectral.ultraspherical). Each equation of order `d` is represented in
      the \f$ C^{(d)} \f$ basis and truncated by `d` rows. Scalar problems
      eliminate the boundary conditions from the operator (see
      chebop2.bcelim), systems append them as additional rows.

In both cases the unknowns are the Chebyshev coefficients of the Newton
correction of each unknown function. solve_linearized() chooses the
discretization size adaptively.
"""

import logging
import warnings

import numpy as np

from ..funcs import chebtech
from ..funcs.chebfun import Chebfun
from ..funcs.chebmatrix import Chebmatrix
from ..numutils import ResolutionWarning
from ..spectral.matsolve import mat_solve
from ..spectral.ultraspherical import convert_mat
from ..chebop2.bcelim import canonical_bc, zero_dof, recover_solution
from ..chebop2.coeffs import ScalarCoeff, FieldCoeff
from .linearize import linearize


__all__ = [
    "CollocationDiscretization",
    "UltrasphericalDiscretization",
    "get_discretization",
    "solve_linearized",
    "LinearStep",
]


logger = logging.getLogger(__name__)


class _Discretization(object):
    r"""Base class of the discretizations.

    The matrix is assembled from a LinearizedProblem upon construction.
    solve() may then be called for any LinearizedProblem of the same size
    (e.g. for a simplified Newton step), of which only the residuals are
    used.
    """

    def __init__(self, lin, mat_solver='scipy.solve'):
        ## Number of coefficients per unknown.
        self.num = lin.num
        ## Number of unknown functions.
        self.num_vars = lin.num_vars
        ## Domain of the problem.
        self.domain = lin.basis.domain
        ## Dense solver passed to mat_solve().
        self.mat_solver = mat_solver
        ## Order of each equation.
        self.orders = lin.equation_orders()
        self._assemble(lin)

    def _assemble(self, lin):
        raise NotImplementedError

    def solve(self, lin):
        r"""Return the coefficients of the Newton correction per unknown."""
        raise NotImplementedError

    def _split(self, x):
        x = np.asarray(x, dtype=float).ravel()
        n = self.num
        return [x[j*n:(j+1)*n] for j in range(self.num_vars)]

    def to_functions(self, coeffs):
        r"""Chebmatrix of the functions with the given coefficients."""
        return Chebmatrix([Chebfun(c, self.domain) for c in coeffs])


def _dropped_rows(num, count):
    r"""Indices of `count` rows alternating between the two ends."""
    rows = []
    lo, hi = 0, num - 1
    for i in range(count):
        if i % 2 == 0:
            rows.append(lo)
            lo += 1
        else:
            rows.append(hi)
            hi -= 1
    return rows


class CollocationDiscretization(_Discretization):
    r"""Rectangular collocation discretization."""

    def _assemble(self, lin):
        basis = lin.basis
        n = self.num
        self._rows = []
        blocks = []
        for i, eq in enumerate(lin.equations):
            keep = np.setdiff1d(np.arange(n), _dropped_rows(n, self.orders[i]))
            self._rows.append(keep)
            blocks.append(np.hstack([
                basis.construct_operator_matrix(eq.jac.get(j, []))[keep]
                for j in range(self.num_vars)
            ]))
        blocks.append(lin.condition_rows())
        ## The full system matrix.
        self.matrix = np.vstack(blocks)

    def solve(self, lin):
        rhs = [-r[keep] for r, keep in zip(lin.residual, self._rows)]
        rhs.append(-lin.condition_values())
        x = mat_solve(self.matrix, np.concatenate(rhs), self.mat_solver)
        return self._split(x)


def _coeff_term(c, domain):
    if np.ptp(c) == 0:
        return ScalarCoeff(c[0])
    return FieldCoeff(Chebfun.from_values(c, domain).simplify())


class UltrasphericalDiscretization(_Discretization):
    r"""Ultraspherical spectral discretization."""

    def _block(self, eq, j, order):
        n = self.num
        A = np.zeros((n, n))
        for k, c in enumerate(eq.jac.get(j, [])):
            if not np.any(c):
                continue
            term = _coeff_term(c, self.domain).ultraspherical_term(n, k, order,
                                                                   self.domain)
            if term is not None:
                A += np.asarray(term)
        return A

    def _assemble(self, lin):
        n = self.num
        ## Untruncated operator blocks, one row of blocks per equation.
        self.blocks = [[self._block(eq, j, self.orders[i])
                        for j in range(self.num_vars)]
                       for i, eq in enumerate(lin.equations)]
        ## Boundary condition rows.
        self.bc_rows = lin.condition_rows()
        ## Whether the conditions are eliminated from the operator.
        self.eliminate = (self.num_vars == 1 and self.orders[0] > 0
                          and self.bc_rows.shape[0] == self.orders[0])
        if not self.eliminate:
            rows = [np.hstack(blocks)[:n-self.orders[i]]
                    for i, blocks in enumerate(self.blocks)]
            rows.append(self.bc_rows)
            self.matrix = np.vstack(rows)

    def _rhs(self, lin):
        n = self.num
        return [convert_mat(n, 0, order).dot(chebtech.vals2coeffs(-r))
                for r, order in zip(lin.residual, self.orders)]

    def solve(self, lin):
        n = self.num
        rhs = self._rhs(lin)
        G = -lin.condition_values()
        if not self.eliminate:
            rhs = [f[:n-order] for f, order in zip(rhs, self.orders)]
            rhs.append(G)
            x = mat_solve(self.matrix, np.concatenate(rhs), self.mat_solver)
            return self._split(x)
        K = self.orders[0]
        B, G, perm = canonical_bc(self.bc_rows, G[:, np.newaxis],
                                  where="left/right")
        L, E = zero_dof(self.blocks[0][0][:, perm], np.ones((1, 1)),
                        rhs[0][:, np.newaxis], B, G)
        Xr = mat_solve(L[:n-K, K:], E[:n-K], self.mat_solver)
        X = recover_solution(np.reshape(Xr, (n - K, 1)), (n, 1),
                             np.zeros((0, 1)), np.zeros((0, n)), B, G,
                             np.arange(1), perm)
        return [X[:, 0]]


_DISCRETIZATIONS = {
    'collocation': CollocationDiscretization,
    'ultraspherical': UltrasphericalDiscretization,
}


def get_discretization(prefs):
    r"""Discretization class selected in the preferences."""
    return _DISCRETIZATIONS[prefs.discretization]


class LinearStep(object):
    r"""Result of solve_linearized()."""

    def __init__(self, delta, discretization, linearization):
        ## The correction as Chebmatrix.
        self.delta = delta
        ## The discretization used (may be reused for simplified steps).
        self.discretization = discretization
        ## The linearization at the size of the discretization.
        self.linearization = linearization

    @property
    def num(self):
        return self.discretization.num

    def simplified(self, N, u, rhs):
        r"""Simplified Newton correction at `u` reusing the discretization."""
        lin = linearize(N, u, self.num, rhs)
        disc = self.discretization
        return disc.to_functions(disc.solve(lin)), lin


def solve_linearized(N, u, rhs, prefs):
    r"""Solve for the Newton correction at `u` with adaptive resolution.

    The sizes in `prefs.dimension_values` which are not smaller than the
    current iterate are tried in turn until the correction is resolved to
    `prefs.happiness_tol` (relative to the size of `u`).

    @return A LinearStep.
    """
    cls = get_discretization(prefs)
    length = max(len(f) for f in u)
    sizes = [n for n in prefs.dimension_values if n >= length]
    if not sizes:
        sizes = [max(prefs.dimension_values[-1], length)]
    scales = [f.vscale() for f in u]
    for num in sizes:
        lin = linearize(N, u, num, rhs)
        disc = cls(lin, prefs.mat_solver)
        coeffs = disc.solve(lin)
        resolved = all(chebtech.is_resolved(c, prefs.happiness_tol, scale=s)
                       for c, s in zip(coeffs, scales))
        logger.debug("%s solve with %d points (resolved: %s)",
                     prefs.discretization, num, resolved)
        if resolved:
            break
    else:
        warnings.warn("Linear solve not resolved with %d points." % num,
                      ResolutionWarning)
    delta = disc.to_functions(
        [Chebfun(c, N.domain).simplify().coeffs
         for c in coeffs]
    )
    return LinearStep(delta, disc, lin)
