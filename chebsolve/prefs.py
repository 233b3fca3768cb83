r"""@package chebsolve.prefs

Preference objects configuring the 1-D and 2-D solvers.

Both classes use ``__slots__`` so that misspelled options are detected
immediately. Solvers never modify the preference objects they are given;
use copy() to derive modified preferences.

@b Examples

```
    prefs = BVPPrefs(discretization='ultraspherical', damped=False)
    u, info = solvebvp(N, 0, prefs=prefs)
```
"""

import numpy as np


__all__ = [
    "BVPPrefs",
    "Cheb2Prefs",
]


_DISCRETIZATION_ALIASES = {
    'collocation': 'collocation',
    'colloc2': 'collocation',
    'ultraspherical': 'ultraspherical',
    'ultras': 'ultraspherical',
}


class _Prefs(object):
    r"""Base class implementing keyword construction and copying."""

    __slots__ = ()

    def __init__(self, **kw):
        for key, val in kw.items():
            setattr(self, key, val)

    def copy(self, **changes):
        r"""Return a copy of these preferences with some options changed."""
        other = type(self)()
        for key in self.__slots__:
            setattr(other, key, getattr(self, key))
        for key, val in changes.items():
            setattr(other, key, val)
        return other

    def __repr__(self):
        opts = ", ".join("%s=%r" % (key, getattr(self, key))
                         for key in self.__slots__)
        return "%s(%s)" % (type(self).__name__, opts)


class BVPPrefs(_Prefs):
    r"""Preferences of the 1-D boundary value problem solver.

    The options correspond to the fields of chebfun's `cheboppref`.
    """

    __slots__ = ("error_tolerance", "damped", "_discretization", "max_iter",
                 "plotting", "dimension_values", "happiness_tol",
                 "lambda_min", "mat_solver", "disp", "verbose")

    def __init__(self, **kw):
        ## Tolerance for the Newton error estimate (or the residual) below
        ## which the Newton iteration is considered converged.
        self.error_tolerance = 1e-10
        ## Whether to use damped Newton steps.
        self.damped = True
        self._discretization = 'collocation'
        ## Maximum number of Newton steps.
        self.max_iter = 25
        ## Time to pause between Newton steps when the display observer
        ## plots the iterates (``'off'`` or a number of seconds).
        self.plotting = 'off'
        ## Discretization sizes tried in turn until the solution is resolved.
        self.dimension_values = (33, 65, 129, 257, 513)
        ## Relative size of the trailing coefficients below which a computed
        ## function is considered resolved.
        self.happiness_tol = 1e-11
        ## Smallest damping factor before the damped Newton iteration gives
        ## up.
        self.lambda_min = 1e-6
        ## Dense matrix solver, see spectral.matsolve.mat_solve().
        self.mat_solver = 'scipy.solve'
        ## Whether to raise NoConvergence (or subclasses) when the Newton
        ## iteration fails. Otherwise, the failure is recorded in the info
        ## object and a ConvergenceWarning is emitted.
        self.disp = False
        ## Whether to print progress information (uses PrintDisplay if no
        ## display observer was given).
        self.verbose = False
        super(BVPPrefs, self).__init__(**kw)

    @property
    def discretization(self):
        r"""Discretization to use, ``'collocation'`` or ``'ultraspherical'``.

        The chebfun names ``'colloc2'`` and ``'ultraS'`` are accepted as
        aliases.
        """
        return self._discretization

    @discretization.setter
    def discretization(self, value):
        try:
            self._discretization = _DISCRETIZATION_ALIASES[str(value).lower()]
        except KeyError:
            raise ValueError("Unknown discretization: %r" % (value,))

    def copy(self, **changes):
        discretization = changes.pop('discretization', None)
        other = super(BVPPrefs, self).copy(**changes)
        if discretization is not None:
            other.discretization = discretization
        return other


class Cheb2Prefs(_Prefs):
    r"""Preferences of the 2-D PDE solver (Chebop2)."""

    __slots__ = ("eps", "dimension_values", "solve_tol",
                 "corner_tol_factor")

    def __init__(self, **kw):
        ## Machine precision used as tolerance for rank decisions and the
        ## filtering of negligible coefficient terms.
        self.eps = np.finfo(float).eps
        ## Sizes tried in turn (in both directions) by the adaptive solve.
        self.dimension_values = (17, 33, 65, 129)
        ## Relative size of the trailing solution coefficients below which
        ## the adaptive solve stops.
        self.solve_tol = 1e-12
        ## The corner consistency check warns if the total mismatch exceeds
        ## `corner_tol_factor * sqrt(tol)`.
        self.corner_tol_factor = 100.0
        super(Cheb2Prefs, self).__init__(**kw)
