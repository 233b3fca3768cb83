r"""@package chebsolve.chebop.linearize

Linearization of a boundary value problem around a given function.

The operator and the boundary conditions of a Chebop are evaluated on
ADFun objects (see ad). The result, a LinearizedProblem, contains the
coefficient functions of the Frechet derivative of the operator, the
residual of the equations and the linearized conditions. It also records
which parts of the problem are linear.
"""

import numbers

import numpy as np

from ..funcs.chebfun import Chebfun
from ..spectral.bases.cheby import ChebyBasis
from ..spectral.bcs import RobinCondition
from .ad import ADFun, ADScalar


__all__ = [
    "linearize",
    "LinearizedProblem",
    "DimensionMismatchError",
]


class DimensionMismatchError(ValueError):
    r"""Raised when the shapes of the right hand side, the initial guess or
    the operator output are incompatible with the number of unknowns."""
    pass


class LinearizedProblem(object):
    r"""Linearization of a boundary value problem on a collocation grid.

    The Newton correction `du` solves
    \f[
        \sum_j \sum_k c^{(ij)}_k \partial^k du_j = -r_i,
        \qquad \ell_m(du) = -g_m,
    \f]
    where `r_i` are the residuals of the equations and `g_m` the values of
    the conditions `\ell_m`.
    """

    def __init__(self, basis, equations, residual, conditions, flags):
        ## ChebyBasis of the grid.
        self.basis = basis
        ## ADFun per equation, holding the coefficient functions.
        self.equations = equations
        ## Residual values per equation at the collocation points.
        self.residual = residual
        ## Linearized conditions (ADScalar objects).
        self.conditions = conditions
        ## Dict of linearity flags for ``'op', 'lbc', 'rbc', 'bc'``.
        self.flags = flags

    @property
    def num(self):
        return self.basis.num

    @property
    def num_vars(self):
        return len(self.equations)

    @property
    def is_linear(self):
        return all(self.flags.values())

    def equation_orders(self):
        r"""Differential order of each equation (at least zero)."""
        return [max([0] + [eq.order(j) for j in range(self.num_vars)])
                for eq in self.equations]

    def variable_orders(self):
        r"""Highest derivative order of each unknown over all equations."""
        return [max([0] + [eq.order(j) for eq in self.equations])
                for j in range(self.num_vars)]

    def condition_values(self):
        return np.array([c.value for c in self.conditions])

    def condition_rows(self):
        r"""Matrix with one row per condition acting on all coefficients."""
        n = self.num
        rows = np.zeros((len(self.conditions), n * self.num_vars))
        for m, cond in enumerate(self.conditions):
            for j, row in cond.rows.items():
                rows[m, j*n:(j+1)*n] = row
        return rows

    def residual_norm(self):
        r"""Largest absolute residual of the equations and conditions."""
        values = [np.abs(r).max() for r in self.residual]
        values.extend(abs(c.value) for c in self.conditions)
        return max(values)


def _to_adfun(basis, obj):
    if isinstance(obj, ADFun):
        return obj
    if isinstance(obj, numbers.Number):
        return ADFun.constant(basis, obj)
    if isinstance(obj, Chebfun):
        return ADFun.constant(basis, obj(basis.pts))
    raise TypeError("Operator returned an unsupported object: %r" % (obj,))


def _at_point(obj, point):
    if isinstance(obj, ADFun):
        return obj(point)
    if isinstance(obj, ADScalar):
        return obj
    if isinstance(obj, numbers.Number):
        return ADScalar(obj)
    raise TypeError("Boundary condition returned an unsupported object: %r"
                    % (obj,))


def _robin(cond, point, u):
    if cond.x is None:
        cond = cond.with_point(point)
    return cond.residual(u)


def end_conditions(N, cond, point, x, unknowns):
    r"""Linearized conditions at the end `point` of the domain.

    See Chebop for the supported forms of `cond`.
    """
    if cond is None:
        return []
    if isinstance(cond, RobinCondition):
        return [_robin(cond, point, unknowns[0])]
    if isinstance(cond, numbers.Number):
        return [u(point) - cond for u in unknowns]
    if isinstance(cond, (list, tuple)):
        if len(unknowns) == 1:
            targets = [unknowns[0]] * len(cond)
        elif len(cond) == len(unknowns):
            targets = unknowns
        else:
            raise DimensionMismatchError(
                "Got %d boundary values for %d unknowns."
                % (len(cond), len(unknowns))
            )
        result = []
        for item, u in zip(cond, targets):
            if item is None:
                continue
            if isinstance(item, RobinCondition):
                result.append(_robin(item, point, u))
            else:
                result.append(u(point) - item)
        return result
    if callable(cond):
        return [_at_point(r, point)
                for r in N.call_bc_func(cond, x, unknowns)]
    raise TypeError("Unsupported boundary condition: %r" % (cond,))


def general_conditions(N, x, unknowns):
    r"""Linearized general conditions `N.bc`."""
    cond = N.bc
    if cond is None:
        return []
    if isinstance(cond, RobinCondition):
        cond = [cond]
    if isinstance(cond, (list, tuple)):
        if not all(isinstance(c, RobinCondition) and c.x is not None for c in cond):
            raise TypeError("General conditions must be RobinCondition objects "
                            "with a point or a callable.")
        return [c.residual(unknowns[0]) for c in cond]
    result = []
    for r in N.call_bc_func(cond, x, unknowns):
        if isinstance(r, numbers.Number):
            r = ADScalar(r)
        if not isinstance(r, ADScalar):
            raise TypeError("General conditions must evaluate to point values "
                            "or integrals (got %r)." % (r,))
        result.append(r)
    return result


def linearize(N, u, num, rhs):
    r"""Linearize the problem `N(u) = rhs` around `u`.

    Args:
        N: Chebop whose operator takes `(x, ...)` (see Chebop.autonomous()).
        u: Chebmatrix with the current iterate.
        num: Number of collocation points.
        rhs: List with one Chebfun per equation.

    @return A LinearizedProblem.
    """
    basis = ChebyBasis(N.domain, num)
    a, b = N.domain
    x = ADFun.constant(basis, basis.pts)
    unknowns = [ADFun.variable(basis, uj.values(num), j) for j, uj in enumerate(u)]
    equations = [_to_adfun(basis, o) for o in N.call_op(x, unknowns)]
    if len(equations) != len(unknowns):
        raise DimensionMismatchError(
            "The operator returns %d equations for %d unknowns."
            % (len(equations), len(unknowns))
        )
    residual = [eq.values - f(basis.pts) for eq, f in zip(equations, rhs)]
    lbc = end_conditions(N, N.lbc, a, x, unknowns)
    rbc = end_conditions(N, N.rbc, b, x, unknowns)
    bc = general_conditions(N, x, unknowns)
    flags = dict(
        op=not any(eq.nonlinear for eq in equations),
        lbc=not any(c.nonlinear for c in lbc),
        rbc=not any(c.nonlinear for c in rbc),
        bc=not any(c.nonlinear for c in bc),
    )
    return LinearizedProblem(basis, equations, residual, lbc + rbc + bc, flags)
