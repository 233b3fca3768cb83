r"""@package chebsolve.chebop.solvebvp

Solve (possibly nonlinear) boundary value problems.

solvebvp() determines the number of unknowns of a Chebop, converts the right
hand side and the initial guess, linearizes the problem around the initial
guess and dispatches to a single linear solve or to the damped Newton
iteration (see newton).

@b Examples

```
    N = Chebop(lambda x, u: u.diff(2) + u**2, lbc=0, rbc=0)
    u, info = solvebvp(N, lambda x: -1 + (1-x**2)**2/4)
    info.converged   # True
    u(0.0)           # approx. 0.5
```
"""

import logging
import numbers
import warnings

import numpy as np

from ..funcs.chebfun import Chebfun
from ..funcs.chebmatrix import Chebmatrix
from ..prefs import BVPPrefs
from ..spectral.matsolve import mat_solve
from .display import make_display
from .info import SolveInfo
from .linearize import linearize, DimensionMismatchError
from .discretize import solve_linearized
from .newton import NonlinearBVPSolver


__all__ = [
    "solvebvp",
    "fit_bcs",
    "ShapeWarning",
    "DimensionMismatchError",
]


logger = logging.getLogger(__name__)


class ShapeWarning(UserWarning):
    r"""Issued when a right hand side or initial guess had to be transposed."""
    pass


def _to_chebfun(item, domain):
    if isinstance(item, Chebfun):
        return item
    if isinstance(item, numbers.Number) or callable(item):
        return Chebfun.from_function(item, domain)
    raise TypeError("Cannot convert %r to a function." % (item,))


def _reshape_numbers(values, num_vars, what):
    r"""Bring numeric data into the shape `(num_vars,)`."""
    values = np.asarray(values, dtype=float)
    if values.ndim == 0:
        return np.full(num_vars, float(values))
    if values.ndim == 1 and values.size == num_vars:
        return values
    if values.shape == (num_vars, 1):
        return values[:, 0]
    if values.shape == (1, num_vars) and num_vars > 1:
        warnings.warn("Transposing the %s to match the number of unknowns."
                      % what, ShapeWarning)
        return values[0]
    raise DimensionMismatchError(
        "The %s has shape %s, but the problem has %d unknown(s)."
        % (what, values.shape, num_vars)
    )


def as_functions(obj, num_vars, domain, what="right hand side"):
    r"""Convert a right hand side or initial guess to a list of Chebfuns.

    Accepted are numbers and numeric arrays (reshaped by the rules of
    _reshape_numbers()), single functions or callables and lists of these,
    and Chebmatrix objects.
    """
    if isinstance(obj, Chebmatrix):
        items = list(obj)
    elif isinstance(obj, (Chebfun, numbers.Number)) or callable(obj):
        items = [obj] * num_vars if isinstance(obj, numbers.Number) else [obj]
    elif isinstance(obj, np.ndarray) or (
            isinstance(obj, (list, tuple))
            and all(isinstance(v, numbers.Number) for v in obj)):
        items = list(_reshape_numbers(obj, num_vars, what))
    elif isinstance(obj, (list, tuple)):
        items = list(obj)
    else:
        raise TypeError("Unsupported %s: %r" % (what, obj))
    if len(items) != num_vars:
        raise DimensionMismatchError(
            "Got %d component(s) for the %s, but the problem has %d "
            "unknown(s)." % (len(items), what, num_vars)
        )
    return [_to_chebfun(item, domain) for item in items]


def fit_bcs(N, u, rhs, prefs, steps=10):
    r"""Correct `u` to satisfy the (linearized) boundary conditions.

    A correction of low degree is added to each unknown, namely the minimum
    norm solution of the linearized conditions in the first `q` Chebyshev
    coefficients of each unknown, where `q` is the number of conditions
    (at least one). For nonlinear conditions, this is repeated up to `steps`
    times until the conditions are satisfied to `prefs.error_tolerance`.

    @return Chebmatrix of the corrected functions.
    """
    num = prefs.dimension_values[0]
    for _ in range(steps):
        lin = linearize(N, u, num, rhs)
        values = lin.condition_values()
        if not values.size or np.abs(values).max() < prefs.error_tolerance:
            break
        q = min(num, max(1, values.size))
        cols = np.concatenate([np.arange(q) + j * num
                               for j in range(lin.num_vars)])
        corr = mat_solve(lin.condition_rows()[:, cols], -values, 'scipy.lstsq')
        u = u + Chebmatrix([Chebfun(corr[j*q:(j+1)*q], N.domain)
                            for j in range(lin.num_vars)])
    return u


def solvebvp(N, rhs=0, prefs=None, display=None):
    r"""Solve the boundary value problem `N(u) = rhs`.

    Args:
        N: Chebop describing the problem. It is not modified.
        rhs: Right hand side. A number (used for every equation), a numeric
            array with one entry per equation, a Chebfun or callable, a list
            of these or a Chebmatrix. Arrays of shape `(1, k)` are transposed
            with a ShapeWarning.
        prefs: BVPPrefs object. Default preferences are used if not given.
        display: Progress observer (a NewtonDisplay or a callable
            `func(it, u, info)`) for the Newton iteration.

    @return Tuple `(u, info)`, where `u` is a Chebfun for scalar problems and
        a Chebmatrix for systems and `info` is a SolveInfo object.

    @b Notes

    Linear problems are solved by a single linear solve. For nonlinear
    problems without initial guess, the zero function is first corrected to
    satisfy the boundary conditions (see fit_bcs()). If the Newton iteration
    fails to converge, a ConvergenceWarning is issued and `info.converged`
    is `False`, unless `prefs.disp` is set, in which case NoConvergence is
    raised.
    """
    if prefs is None:
        prefs = BVPPrefs()
    num_vars = N.count_vars()
    N = N.autonomous(num_vars)
    domain = N.domain
    rhs = as_functions(rhs, num_vars, domain)
    has_init = N.init is not None
    if has_init:
        u0 = Chebmatrix(as_functions(N.init, num_vars, domain,
                                     what="initial guess"))
    else:
        u0 = Chebmatrix([Chebfun.constant(0.0, domain) for _ in range(num_vars)])
    lin = linearize(N, u0, prefs.dimension_values[0], rhs)
    info = SolveInfo(lin.flags)
    info.discretization = prefs.discretization
    logger.debug("solvebvp: %d unknown(s), flags %s", num_vars, lin.flags)
    if info.is_linear:
        u = _solve_linear(N, u0, rhs, prefs, info)
    else:
        if not has_init:
            u0 = fit_bcs(N, u0, rhs, prefs)
        solver = NonlinearBVPSolver(N, rhs, prefs, make_display(display, prefs))
        u = solver.solve(u0, info)
    return (u[0] if len(u) == 1 else u), info


def _solve_linear(N, u0, rhs, prefs, info):
    step = solve_linearized(N, u0, rhs, prefs)
    u = (u0 + step.delta).simplify()
    info.norm_delta.append(step.delta.norm())
    info.err_est.append(info.norm_delta[-1])
    info.lambdas.append(1.0)
    info.num_points = step.num
    info.residual = linearize(N, u, step.num, rhs).residual_norm()
    info.error = info.residual
    info.converged = True
    info.reason = "linear"
    return u
