r"""@package chebsolve.chebop.info

Diagnostic information returned by the boundary value problem solvers.
"""


__all__ = [
    "SolveInfo",
]


class SolveInfo(object):
    r"""Information about a finished solve.

    A new object is created for each call of solvebvp(). The history lists
    are filled in iteration order by the Newton solver. For linear problems
    they contain a single entry.
    """

    __slots__ = ("flags", "converged", "reason", "error", "residual",
                 "norm_delta", "err_est", "lambdas", "discretization",
                 "num_points")

    def __init__(self, flags=None):
        ## Linearity flags of the parts ``'op', 'lbc', 'rbc', 'bc'``.
        self.flags = dict(flags) if flags else dict()
        ## Whether the requested tolerance was reached.
        self.converged = False
        ## Short description of why the solver stopped.
        self.reason = "unspecified"
        ## Final estimate of the error of the solution.
        self.error = None
        ## Largest residual of the equations and conditions at the
        ## collocation points of the last linearization.
        self.residual = None
        ## Norms of the Newton corrections.
        self.norm_delta = []
        ## Newton error estimates.
        self.err_est = []
        ## Damping factors of the accepted steps.
        self.lambdas = []
        ## Name of the discretization used.
        self.discretization = None
        ## Discretization size of the last linear solve.
        self.num_points = None

    @property
    def is_linear(self):
        r"""Whether all parts of the problem are linear."""
        return all(self.flags.values())

    @property
    def iterations(self):
        r"""Number of Newton corrections computed."""
        return len(self.norm_delta)

    def __repr__(self):
        return ("SolveInfo(linear=%s, converged=%s, reason=%r, iterations=%d, "
                "error=%s)" % (self.is_linear, self.converged, self.reason,
                               self.iterations, self.error))
