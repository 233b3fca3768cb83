r"""@package chebsolve.chebop.newton

Damped Newton iteration for nonlinear boundary value problems.

Each step linearizes the problem around the current iterate (see
linearize), solves the linear problem for the Newton correction `delta`
with adaptive resolution (see discretize) and updates the iterate by
`lambda * delta`.

The damping strategy is the error-oriented global Newton method of
\ref deuflhard2004 "[1]": a trial step with damping factor `lambda` is
accepted if the simplified Newton correction at the trial point, computed
with the same discretization, satisfies the monotonicity test
\f[
    \theta = \frac{\Vert\bar\delta\Vert}{\Vert\delta\Vert}
        < 1 - \frac{\lambda}{4}.
\f]
Otherwise, `lambda` is halved. The next step starts with twice the
previously accepted factor (at most `1`). Corrections that are already
small relative to the iterate (below the square root of the tolerance) are
taken in full, as is a step whose simplified correction is below the
tolerance.

From the contraction factor \f$ c = \Vert\delta_k\Vert/\Vert\delta_{k-1}\Vert \f$
the error is estimated as \f$ \Vert\delta_k\Vert / (1 - c^2) \f$. The
iteration has converged when this estimate (relative to the size of the
iterate) drops below the tolerance with a full step, or when the residual
at the collocation points does.

@b References

\anchor deuflhard2004 [1] Deuflhard, P. "Newton Methods for Nonlinear
    Problems. Affine Invariance and Adaptive Algorithms." Springer, Berlin
    (2004).
"""

import logging
import warnings

import numpy as np

from scipy.linalg import LinAlgWarning, LinAlgError

from ..numutils import raise_all_warnings, NumericalError
from .discretize import solve_linearized


__all__ = [
    "NonlinearBVPSolver",
    "NoConvergence",
    "StepLimitExceeded",
    "DampingFailed",
    "ConvergenceWarning",
]


logger = logging.getLogger(__name__)


class NoConvergence(Exception):
    r"""Base for exceptions indicating failed convergence of Newton steps.

    This exception is raised directly when an error is raised by methods
    called during the Newton steps when these are related to convergence (e.g.
    `scipy.linalg.LinAlgWarning`).
    """
    pass


class StepLimitExceeded(NoConvergence):
    r"""Raised when convergence not achieved within the step count limit."""
    pass


class DampingFailed(NoConvergence):
    r"""Raised when the damping factor falls below its lower limit."""
    pass


class ConvergenceWarning(UserWarning):
    r"""Issued instead of raising NoConvergence if `disp` is not set."""
    pass


class NonlinearBVPSolver(object):
    r"""Class implementing the damped Newton steps.

    After constructing a solver object, configure it using its public
    instance attributes (all default to the values of the given BVPPrefs).
    Then, call solve().
    """

    __slots__ = ("N", "rhs", "prefs", "display", "tol", "max_iter", "damped",
                 "lambda_min", "disp", "verbose", "_iterate")

    def __init__(self, N, rhs, prefs, display):
        r"""Create a solver for `N(u) = rhs`.

        @param N
            Chebop with an operator taking `(x, ...)`.
        @param rhs
            List with one Chebfun per equation.
        @param prefs
            BVPPrefs object. It is not modified.
        @param display
            NewtonDisplay observer.
        """
        ## The problem to solve.
        self.N = N
        ## Right hand side, one Chebfun per equation.
        self.rhs = rhs
        ## Preferences used for the linear solves.
        self.prefs = prefs
        ## Observer notified in each iteration.
        self.display = display
        ## Tolerance for the error estimate and the residual.
        self.tol = prefs.error_tolerance
        ## Maximum number of Newton steps to take.
        self.max_iter = prefs.max_iter
        ## Whether to damp the Newton steps.
        self.damped = prefs.damped
        ## Smallest damping factor to try.
        self.lambda_min = prefs.lambda_min
        ## Whether to raise NoConvergence (or subclasses) on failure.
        self.disp = prefs.disp
        ## Whether to print why the iteration stopped.
        self.verbose = prefs.verbose
        self._iterate = None

    def solve(self, u0, info):
        r"""Perform the Newton steps starting at `u0`.

        The results and the history of the iteration are stored in `info`.

        @return The last iterate as Chebmatrix.
        """
        self._iterate = u0
        self.display.start(u0, info)
        with raise_all_warnings():
            try:
                self._solve(u0, info)
            except (LinAlgWarning, LinAlgError, FloatingPointError,
                    NumericalError) as e:
                info.reason = "numerical error: %s" % e
                self._raise(NoConvergence, str(e))
        self.display.finish(self._iterate, info)
        return self._iterate

    def _solve(self, u, info):
        r"""Wrapped function for performing the Newton steps."""
        lam = 1.0
        norm_delta_old = None
        for it in range(self.max_iter):
            self.display.iteration_start(it, u, info)
            step = solve_linearized(self.N, u, self.rhs, self.prefs)
            info.num_points = step.num
            info.residual = step.linearization.residual_norm()
            if info.residual < self.tol:
                self._converged(info, "residual")
                return
            delta = step.delta
            norm_delta = delta.norm()
            scale = max(1.0, u.norm())
            if norm_delta == 0:
                self._converged(info, "zero correction")
                return
            # Corrections below sqrt(tol) are taken undamped.
            small = norm_delta / scale < self.tol
            full = norm_delta / scale < np.sqrt(self.tol)
            if self.damped and not full:
                lam, u = self._damped_step(step, u, delta, norm_delta,
                                           min(1.0, 2.0 * lam),
                                           self.tol * scale)
                if u is None:
                    info.reason = "damping failed"
                    return
            else:
                lam = 1.0
                u = (u + delta).simplify()
            self._iterate = u
            c = norm_delta / norm_delta_old if norm_delta_old else 1.0
            err_est = norm_delta / (1.0 - c**2) if c < 1 else norm_delta
            if small:
                err_est = norm_delta
            norm_delta_old = norm_delta
            info.norm_delta.append(norm_delta)
            info.err_est.append(err_est / scale)
            info.lambdas.append(lam)
            info.error = err_est / scale
            logger.debug("Newton step %d: |delta|=%g, c=%g, lambda=%g, N=%d",
                         it+1, norm_delta, c, lam, step.num)
            self.display.iteration_end(it, u, delta, info)
            if lam == 1.0 and err_est / scale < self.tol:
                self._converged(info, "error estimate")
                return
        info.reason = "step limit"
        self._raise(
            StepLimitExceeded,
            "Newton iteration did not reach the desired tolerance within %d "
            "steps." % self.max_iter
        )

    def _damped_step(self, step, u, delta, norm_delta, lam, atol):
        r"""Find an acceptable damping factor.

        A full step is accepted if its simplified correction is below `atol`.

        @return Tuple `(lambda, new_iterate)`. The iterate is `None` if no
            acceptable factor was found and `disp` is not set.
        """
        while True:
            trial = (u + lam * delta).simplify()
            simplified, _lin = step.simplified(self.N, trial, self.rhs)
            norm_simplified = simplified.norm()
            theta = norm_simplified / norm_delta
            logger.debug("  lambda=%g: theta=%g", lam, theta)
            if lam == 1.0 and norm_simplified < atol:
                return lam, trial
            if theta < 1.0 - lam / 4.0:
                return lam, trial
            lam /= 2.0
            if lam < self.lambda_min:
                self._iterate = u
                self._raise(
                    DampingFailed,
                    "Damping factor fell below %g." % self.lambda_min
                )
                return lam, None

    def _converged(self, info, reason):
        info.converged = True
        info.reason = reason
        if info.error is None:
            info.error = info.residual

    def _raise(self, ex_cls, msg):
        r"""Raise an exception depending on the `disp` setting.

        If `disp==False`, a ConvergenceWarning is issued instead.
        """
        if self.disp:
            raise ex_cls(msg)
        if self.verbose:
            print("Stopping Newton search: %s" % msg)
        warnings.warn(msg, ConvergenceWarning)
