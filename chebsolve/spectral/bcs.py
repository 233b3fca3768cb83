r"""@package chebsolve.spectral.bcs

Classes for imposing boundary conditions.

A boundary condition is a linear functional acting on the Chebyshev
coefficients of the solution together with a prescribed value. In 1-D, the
functional is evaluated at a point and the value is a number. For the sides
of a rectangle (see chebop2.Chebop2), the functional acts on the direction
normal to the side and the value is a function along the side.
"""

import numbers

import numpy as np

from ..funcs.chebfun import Chebfun
from .bases.cheby import ChebyBasis


__all__ = [
    "DirichletCondition",
    "NeumannCondition",
    "RobinCondition",
    "as_conditions",
]


class NDSolveError(Exception):
    r"""Raised for problems of the numerical task (like ill-conditioned
    boundary conditions)."""
    pass


def _make_callable(func):
    r"""Make sure a given object is callable.

    `func` may also be a single numeric value, in which case a dummy function
    is created always evaluating to this value. If `func==None`, that value is
    set to zero.
    """
    if func is None:
        func = 0.0
    if not callable(func):
        value = func
        func = lambda x: value
    return func


class RobinCondition(object):
    r"""General Robin-type boundary condition.

    This class represents general Dirichlet, Neumann, or mixed (Robin) type
    boundary conditions suitable for 1D and 2D problems.
    """
    def __init__(self, x=None, alpha=1, beta=0, value=0):
        r"""Define the boundary condition.

        The general form of this boundary condition is \f[
            \alpha u(x) + \beta \partial_\nu u(x) = g,
        \f]
        where \f$ x \f$ is specified by the `x` argument (see below) and
        \f$ g \f$ is given by `value`. The derivative of `u` is taken in the
        direction normal to the boundary (i.e. w.r.t. `x` for the left/right
        sides of a rectangle and w.r.t. `y` for the lower/upper sides). In 1D,
        we simply have \f$ \partial_\nu u(x) = u'(x) \f$.

        For a pure Dirichlet condition, set ``alpha=1, beta=0`` and for a pure
        Neumann condition ``alpha=0, beta=1``.

        Args:
            x: (float, optional)
                Point at which to impose the condition in 1D problems. Must be
                `None` (default) when the condition is assigned to a side of a
                rectangle, which then determines the location.
            alpha: (float or callable)
                Coefficient of the 'Dirichlet' part of the condition. Callables
                are evaluated at `x` and only allowed in 1D.
            beta: (float or callable)
                Coefficient of the 'Neumann' part of the condition.
            value: (float, callable or Chebfun)
                Value of the condition. On the side of a rectangle, this is a
                function of the coordinate along the side.
        """
        ## Where to impose the condition (1D only).
        self._x = x
        ## Callable or value multiplying the function
        self._alpha = alpha
        ## Callable or value multiplying the function's first derivative
        self._beta = beta
        ## Callable or value the function + derivative (as specified by
        ## `alpha` and `beta`) should attain.
        self._value = value

    @property
    def x(self):
        return self._x

    def with_point(self, x):
        r"""Return a copy of this condition imposed at the point `x`."""
        return RobinCondition(x, self._alpha, self._beta, self._value)

    def _coefficients(self, x):
        alpha = _make_callable(self._alpha)(x)
        beta = _make_callable(self._beta)(x)
        if alpha == beta == 0:
            raise NDSolveError("Boundary condition with alpha = beta = 0.")
        return float(alpha), float(beta)

    def functional(self, num, domain, x=None):
        r"""Row vector of the condition acting on `num` Chebyshev coefficients.

        Args:
            num: Number of coefficients.
            domain: Interval `(a, b)` of the direction the condition acts on.
            x: Point in `domain` at which to impose the condition. Defaults
                to the point given upon construction.
        """
        if x is None:
            x = self._x
        if x is None:
            raise ValueError("No point given to impose the condition at.")
        basis = ChebyBasis(domain, num)
        t = float(basis.transform(x, back=True))
        alpha, beta = self._coefficients(x)
        row = np.zeros(num)
        if alpha != 0:
            row += alpha * basis.evaluate_all_at(t, 0)
        if beta != 0:
            row += beta * basis.evaluate_all_at(t, 1)
        if not np.any(row):
            raise NDSolveError("Boundary condition numerically ill-conditioned. "
                               "The condition might already be satisfied by the "
                               "chosen basis or alpha = beta = 0.")
        return row

    def value_coeffs(self, num, domain):
        r"""Chebyshev coefficients of the prescribed value along a side.

        The value function is truncated or padded to `num` coefficients on
        the interval `domain` (the direction along the side).
        """
        value = self._value
        if value is None:
            value = 0.0
        if isinstance(value, numbers.Number):
            coeffs = np.zeros(num)
            coeffs[0] = value
            return coeffs
        if not isinstance(value, Chebfun):
            value = Chebfun.from_function(value, domain)
        return value.prolong(num).coeffs

    def residual(self, u):
        r"""Evaluate \f$ \alpha u(x) + \beta u'(x) - g \f$ for a 1D function.

        Works for Chebfun objects as well as for the linearization objects of
        the BVP solver, for which the result carries the linearized condition.
        """
        x = self._x
        alpha, beta = self._coefficients(x)
        value = _make_callable(self._value)(x)
        result = alpha * u(x)
        if beta != 0:
            result = result + beta * u.diff()(x)
        return result - value


class DirichletCondition(RobinCondition):
    r"""A Dirichlet boundary condition.

    This represents a RobinCondition with `alpha==1` and `beta==0`.
    """
    def __init__(self, x=None, value=0):
        super(DirichletCondition, self).__init__(x, 1, 0, value)


class NeumannCondition(RobinCondition):
    r"""A Neumann boundary condition.

    This represents a RobinCondition with `alpha==0` and `beta==1`.
    """
    def __init__(self, x=None, value=0):
        super(NeumannCondition, self).__init__(x, 0, 1, value)


def as_conditions(cond):
    r"""Normalize a side condition specification to a list of RobinCondition.

    Accepts `None` (no condition), a RobinCondition, a value (number,
    callable of the coordinate along the side or Chebfun) which is turned
    into a Dirichlet condition, or a list/tuple of these.
    """
    if cond is None:
        return []
    if isinstance(cond, (list, tuple)):
        result = []
        for item in cond:
            result.extend(as_conditions(item))
        return result
    if isinstance(cond, RobinCondition):
        return [cond]
    return [DirichletCondition(value=cond)]
