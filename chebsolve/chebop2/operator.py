r"""@package chebsolve.chebop2.operator

Linear partial differential operators on rectangles.

@b Examples

```
    # Laplace equation u_xx + u_yy = 0 with Dirichlet conditions.
    N = Chebop2([[0, 0, 1], [0, 0, 0], [1, 0, 0]], domain=(-1, 1, -1, 1),
                lbc=lambda y: np.exp(-1)*np.sin(y),
                rbc=lambda y: np.exp(1)*np.sin(y),
                dbc=lambda x: np.exp(x)*np.sin(-1),
                ubc=lambda x: np.exp(x)*np.sin(1))
    u = N.solve(0)
```
"""

import logging
import numbers
import warnings

import numpy as np

from ..funcs import chebtech
from ..funcs.chebfun import Chebfun
from ..funcs.chebfun2 import Chebfun2
from ..numutils import ResolutionWarning
from ..prefs import Cheb2Prefs
from ..spectral.bcs import as_conditions
from .coeffs import EmptyCoeff, ScalarCoeff, FieldCoeff, as_coeff, coeff_matrix
from .discretisation import construct_discretisation
from .lowrank import LowRankFactorization, decompose_operator
from .sylvester import solve_matrix_equation


__all__ = [
    "Chebop2",
]


logger = logging.getLogger(__name__)


def _is_zero(entry):
    if isinstance(entry, numbers.Number):
        return entry == 0
    if isinstance(entry, ScalarCoeff):
        return entry.value == 0
    return entry.is_empty


def _scale_entries(arr, factor):
    if arr.dtype != object:
        return factor * arr
    out = np.empty(arr.shape, dtype=object)
    for idx, entry in np.ndenumerate(arr):
        out[idx] = entry.scaled(factor)
    return out


class Chebop2(object):
    r"""Linear PDE operator \f$ \sum_{i,j} a_{ij} \partial_x^i \partial_y^j \f$.

    The operator is defined on the rectangle `domain = (a, b, c, d)`, i.e.
    `x` in `[a, b]` and `y` in `[c, d]`. Boundary conditions are attached to
    the four sides: `lbc` (`x = a`) and `rbc` (`x = b`) are functions of `y`,
    `dbc` (`y = c`) and `ubc` (`y = d`) are functions of `x`.
    """

    def __init__(self, coeffs, domain=(-1, 1, -1, 1), lbc=None, rbc=None,
                 ubc=None, dbc=None, U=None, S=None, V=None):
        r"""Create the operator.

        Args:
            coeffs: Nested list (or array) with `coeffs[i][j]` multiplying
                \f$ \partial_x^i \partial_y^j u \f$. Entries may be numbers,
                Chebfun2 objects, Chebfun objects (functions of `x`),
                callables `f(x, y)` or `None`.
            domain: Rectangle `(a, b, c, d)`.
            lbc, rbc, ubc, dbc: Conditions of the respective side. Each may
                be `None`, a value (number, callable of the coordinate along
                the side or Chebfun) prescribing Dirichlet data, a
                spectral.bcs.RobinCondition or a list of these.
            U, S, V: Optional precomputed low rank factorization (see
                lowrank.LowRankFactorization).
        """
        domain = tuple(float(v) for v in np.ravel(domain))
        if len(domain) != 4 or not (domain[1] > domain[0] and domain[3] > domain[2]):
            raise ValueError("Invalid domain: %s" % (domain,))
        ## Rectangle `(a, b, c, d)`.
        self.domain = domain
        ## Coefficient matrix (float array or object array of tagged
        ## coefficients), trimmed to `(xorder+1, yorder+1)`.
        self.coeffs = self._trim(self._normalize(coeffs))
        self.lbc = lbc
        self.rbc = rbc
        self.ubc = ubc
        self.dbc = dbc
        self._factorization = None
        if U is not None:
            U = np.asarray(U)
            self._factorization = LowRankFactorization(
                U, S, np.asarray(V), dense=U.dtype != object
            )

    def _normalize(self, coeffs):
        if isinstance(coeffs, np.ndarray) and coeffs.dtype != object:
            return np.atleast_2d(np.asarray(coeffs, dtype=float))
        rows = [list(row) if isinstance(row, (list, tuple, np.ndarray)) else [row]
                for row in coeffs]
        if all(isinstance(e, numbers.Number) for row in rows for e in row):
            width = max(len(row) for row in rows)
            return np.array([row + [0.0] * (width - len(row)) for row in rows],
                            dtype=float)
        rows = [[self._lift(e) for e in row] for row in rows]
        return coeff_matrix(rows, self.domain)

    def _lift(self, entry):
        if isinstance(entry, Chebfun):
            f = entry
            return Chebfun2.from_function(lambda x, y: f(x) + 0 * y, self.domain)
        return entry

    @staticmethod
    def _trim(A):
        nonzero = np.zeros(A.shape, dtype=bool)
        for idx, entry in np.ndenumerate(A):
            nonzero[idx] = not _is_zero(entry)
        if not nonzero.any():
            return A[:1, :1]
        xorder = np.nonzero(nonzero.any(axis=1))[0].max()
        yorder = np.nonzero(nonzero.any(axis=0))[0].max()
        return A[:xorder+1, :yorder+1]

    @classmethod
    def from_terms(cls, terms, domain=(-1, 1, -1, 1), **kw):
        r"""Create an operator from a dict `{(i, j): coefficient}`."""
        if not terms:
            return cls([[0.0]], domain, **kw)
        nx = max(i for i, _ in terms) + 1
        ny = max(j for _, j in terms) + 1
        rows = [[terms.get((i, j), 0.0) for j in range(ny)] for i in range(nx)]
        return cls(rows, domain, **kw)

    @property
    def lbc(self):
        return self._lbc
    @lbc.setter
    def lbc(self, value):
        self._lbc = as_conditions(value)

    @property
    def rbc(self):
        return self._rbc
    @rbc.setter
    def rbc(self, value):
        self._rbc = as_conditions(value)

    @property
    def ubc(self):
        return self._ubc
    @ubc.setter
    def ubc(self, value):
        self._ubc = as_conditions(value)

    @property
    def dbc(self):
        return self._dbc
    @dbc.setter
    def dbc(self, value):
        self._dbc = as_conditions(value)

    @property
    def xorder(self):
        r"""Highest `x` derivative order with a nonzero coefficient."""
        return self.coeffs.shape[0] - 1

    @property
    def yorder(self):
        r"""Highest `y` derivative order with a nonzero coefficient."""
        return self.coeffs.shape[1] - 1

    @property
    def is_constant(self):
        r"""Whether all coefficients are constants."""
        return self.coeffs.dtype != object

    def __repr__(self):
        return ("Chebop2(domain=%s, xorder=%d, yorder=%d)"
                % (self.domain, self.xorder, self.yorder))

    def factorization(self, tol):
        r"""Low rank factorization of the operator (see lowrank)."""
        if self._factorization is not None:
            return self._factorization
        return decompose_operator(self.coeffs, tol)

    def _copy_with(self, coeffs, factorization):
        op = Chebop2.__new__(Chebop2)
        op.domain = self.domain
        op.coeffs = coeffs
        op._lbc, op._rbc = list(self._lbc), list(self._rbc)
        op._ubc, op._dbc = list(self._ubc), list(self._dbc)
        op._factorization = factorization
        return op

    def __mul__(self, other):
        if not isinstance(other, numbers.Number):
            return NotImplemented
        fact = self._factorization
        if fact is not None:
            fact = LowRankFactorization(_scale_entries(fact.U, other), fact.S,
                                        fact.V, fact.dense)
        return self._copy_with(_scale_entries(self.coeffs, other), fact)

    __rmul__ = __mul__

    def __neg__(self):
        return -1 * self

    def __call__(self, u):
        r"""Apply the operator to a function.

        Args:
            u: Chebfun2 or callable `u(x, y)` on the operator's domain.

        @return The Chebfun2 \f$ \sum a_{ij} \partial_x^i \partial_y^j u \f$.
        """
        if not isinstance(u, Chebfun2):
            u = Chebfun2.from_function(u, self.domain)
        result = Chebfun2(np.zeros((1, 1)), self.domain)
        for (i, j), entry in np.ndenumerate(self.coeffs):
            entry = as_coeff(entry)
            if isinstance(entry, EmptyCoeff):
                continue
            deriv = u.diff(i, axis='x').diff(j, axis='y')
            if isinstance(entry, ScalarCoeff):
                if entry.value != 0:
                    result = result + entry.value * deriv
            elif isinstance(entry, FieldCoeff):
                result = result + entry.field * deriv
        return result

    def solve(self, f, m=None, n=None, prefs=None):
        r"""Solve `N(u) = f` subject to the boundary conditions.

        Args:
            f: Right hand side (Chebfun2, number or callable `f(x, y)`).
            m, n: Number of coefficients in `y` and `x` direction. If both
                are omitted, the sizes in `prefs.dimension_values` are tried
                in turn until the solution is resolved.
            prefs: Cheb2Prefs object.

        @return The solution as Chebfun2.
        """
        prefs = Cheb2Prefs() if prefs is None else prefs.copy()
        if not isinstance(f, Chebfun2):
            f = Chebfun2.from_function(f, self.domain)
        if m is not None or n is not None:
            X = self._solve_coeffs(f, m or n, n or m, prefs)
            return Chebfun2(X, self.domain)
        for size in prefs.dimension_values:
            X = self._solve_coeffs(f, size, size, prefs)
            resolved = (chebtech.is_resolved(X, prefs.solve_tol)
                        and chebtech.is_resolved(X.T, prefs.solve_tol))
            logger.debug("Solved PDE with %dx%d coefficients (resolved: %s).",
                         size, size, resolved)
            if resolved:
                break
        else:
            warnings.warn("Solution not resolved with %dx%d coefficients."
                          % (size, size), ResolutionWarning)
        cut_y = chebtech.chop_length(X, prefs.solve_tol)
        cut_x = chebtech.chop_length(X.T, prefs.solve_tol)
        return Chebfun2(X[:cut_y, :cut_x], self.domain)

    def _solve_coeffs(self, f, m, n, prefs):
        system = construct_discretisation(self, f, m, n, prefs)
        Xr = solve_matrix_equation(system.terms, system.rhs)
        return system.recover(Xr)
