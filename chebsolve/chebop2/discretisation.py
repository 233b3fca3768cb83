r"""@package chebsolve.chebop2.discretisation

Discretization of linear PDEs as generalized Sylvester matrix equations.

Using the low rank factorization of the operator (see lowrank), the
discretized PDE on an `m x n` grid of Chebyshev coefficients `X` (rows:
`y`, columns: `x`) reads
\f[
    \sum_{r=1}^k A_r X B_r^T = F,
\f]
where `A_r` (`m x m`) and `B_r` (`n x n`) are ultraspherical discretizations
of the 1-D operators in `y` and `x` direction, respectively. The boundary
conditions are eliminated from this system (see bcelim), which reduces it to
a square system for the remaining coefficients.
"""

import logging

import numpy as np

from ..funcs.chebfun2 import Chebfun2
from ..spectral.bcs import NDSolveError
from ..spectral.ultraspherical import convert_mat
from .bcelim import canonical_bc, zero_dof, check_corners, recover_solution
from .lowrank import require_rank


__all__ = [
    "construct_discretisation",
    "unconstrained_matrix_equation",
    "construct_rhs",
    "DiscretizedSystem",
    "IllPosedError",
]


logger = logging.getLogger(__name__)


class IllPosedError(NDSolveError):
    r"""Raised if the boundary conditions do not match the operator's order."""
    pass


def unconstrained_matrix_equation(terms, n, order, domain):
    r"""Discretize a 1-D operator \f$ \sum_k a_k \partial^k \f$.

    Args:
        terms: Tagged coefficients `a_k` indexed by derivative order `k`.
        n: Number of coefficients.
        order: Total differential order of the operator in this direction.
            All terms are represented in the \f$ C^{(order)} \f$ basis.
        domain: Interval of this direction.

    @return Dense `n x n` matrix.
    """
    A = np.zeros((n, n))
    for k, coeff in enumerate(terms):
        if k > order:
            break
        term = coeff.ultraspherical_term(n, k, order, domain)
        if term is not None:
            A += np.asarray(term)
    return A


def construct_rhs(f, m, n, xorder, yorder, domain):
    r"""Coefficients of the right hand side in the operator's bases.

    Args:
        f: Right hand side as Chebfun2, number or callable `f(x, y)`.
        m, n: Number of coefficients in `y` and `x` direction.
        xorder, yorder: Differential orders of the operator.
        domain: Rectangle `(a, b, c, d)`.

    @return The `m x n` matrix `S_y F S_x^T`, where `F` are the (truncated or
        zero-padded) Chebyshev coefficients of `f`.
    """
    if not isinstance(f, Chebfun2):
        f = Chebfun2.from_function(f, domain)
    F = f.prolong(m, n).coeffs
    Sy = convert_mat(m, 0, yorder)
    Sx = convert_mat(n, 0, xorder)
    return np.asarray(Sy.dot(Sx.dot(F.T).T))


def _side_conditions(conditions, point, num_normal, dom_normal,
                     num_along, dom_along):
    r"""Stack the functionals and value coefficients of the conditions of a side."""
    B = np.zeros((len(conditions), num_normal))
    G = np.zeros((len(conditions), num_along))
    for i, cond in enumerate(conditions):
        B[i] = cond.functional(num_normal, dom_normal, x=point)
        G[i] = cond.value_coeffs(num_along, dom_along)
    return B, G


def _boundary_data(N, m, n):
    a, b, c, d = N.domain
    xdom, ydom = N.domain[:2], N.domain[2:]
    bcs = dict()
    vals = dict()
    bcs['left'], vals['left'] = _side_conditions(N.lbc, a, n, xdom, m, ydom)
    bcs['right'], vals['right'] = _side_conditions(N.rbc, b, n, xdom, m, ydom)
    bcs['down'], vals['down'] = _side_conditions(N.dbc, c, m, ydom, n, xdom)
    bcs['up'], vals['up'] = _side_conditions(N.ubc, d, m, ydom, n, xdom)
    return bcs, vals


class DiscretizedSystem(object):
    r"""Matrix equation of a PDE with the boundary conditions eliminated.

    The reduced equation is `sum(A.dot(X).dot(B.T) for A, B in terms) = rhs`
    for the inner block `X` of the (permuted) coefficient matrix. Use
    recover() to obtain the full solution.
    """

    def __init__(self, terms, rhs, shape, orders, bcs, vals, canonical,
                 perms, splits):
        ## List of `(A_r, B_r)` pairs.
        self.terms = terms
        ## Right hand side of the reduced equation.
        self.rhs = rhs
        ## Shape `(m, n)` of the full coefficient matrix.
        self.shape = shape
        ## Differential orders `(xorder, yorder)`.
        self.orders = orders
        ## Raw boundary functionals per side (see bcelim.check_corners()).
        self.bcs = bcs
        ## Raw boundary value coefficients per side.
        self.vals = vals
        ## Canonical conditions `(Bx, Gx, By, Gy)` in the permuted ordering.
        self.canonical = canonical
        ## Column permutations `(perm_x, perm_y)`.
        self.perms = perms
        ## Flags `(xsplit, ysplit)` of the even/odd decoupling detection.
        self.splits = splits

    @property
    def rank(self):
        return len(self.terms)

    @property
    def xsplit(self):
        return self.splits[0]

    @property
    def ysplit(self):
        return self.splits[1]

    def recover(self, Xr):
        r"""Full `m x n` coefficient matrix for a solution of the reduced system."""
        Bx, Gx, By, Gy = self.canonical
        perm_x, perm_y = self.perms
        return recover_solution(Xr, self.shape, Bx, Gx, By, Gy, perm_x, perm_y)


def construct_discretisation(N, f, m, n, prefs):
    r"""Build the reduced matrix equation for the problem `N(u) = f`.

    Args:
        N: The Chebop2 operator including its boundary conditions.
        f: Right hand side (Chebfun2, number or callable).
        m, n: Number of coefficients in `y` and `x` direction.
        prefs: Cheb2Prefs object.

    @return A DiscretizedSystem.

    Raises:
        DegenerateOperatorError: If the operator has numerical rank zero.
        IllPosedError: If the number of conditions in a direction differs
            from the order of the operator in that direction.
        LinearlyDependentBCsError: If the conditions of a direction are
            linearly dependent.
    """
    tol = prefs.eps
    xorder, yorder = N.xorder, N.yorder
    xdom, ydom = N.domain[:2], N.domain[2:]
    factorization = require_rank(N.factorization(tol))
    bcs, vals = _boundary_data(N, m, n)
    Kx = bcs['left'].shape[0] + bcs['right'].shape[0]
    Ky = bcs['down'].shape[0] + bcs['up'].shape[0]
    if Kx != xorder:
        raise IllPosedError(
            "The operator has order %d in x but %d conditions are imposed on "
            "the left and right sides." % (xorder, Kx)
        )
    if Ky != yorder:
        raise IllPosedError(
            "The operator has order %d in y but %d conditions are imposed on "
            "the upper and lower sides." % (yorder, Ky)
        )
    if min(m, n) <= max(xorder, yorder):
        raise ValueError("Discretization size %dx%d too small for an operator "
                         "of order (%d, %d)." % (m, n, xorder, yorder))
    terms = []
    for r in range(factorization.rank):
        scale = np.sqrt(factorization.S[r])
        A = unconstrained_matrix_equation(factorization.y_terms(r), m, yorder, ydom)
        B = unconstrained_matrix_equation(factorization.x_terms(r), n, xorder, xdom)
        terms.append((scale * A, scale * B))
    E = construct_rhs(f, m, n, xorder, yorder, N.domain)

    By, Gy, perm_y = canonical_bc(np.vstack([bcs['up'], bcs['down']]),
                                  np.vstack([vals['up'], vals['down']]),
                                  where="up/down (y)")
    Bx, Gx, perm_x = canonical_bc(np.vstack([bcs['left'], bcs['right']]),
                                  np.vstack([vals['left'], vals['right']]),
                                  where="left/right (x)")
    Gy = Gy[:, perm_x]
    Gx = Gx[:, perm_y]
    terms = [(A[:, perm_y], B[:, perm_x]) for A, B in terms]

    eliminated = []
    for A, B in terms:
        A, E = zero_dof(A, B, E, By, Gy)
        eliminated.append((A, B))
    terms = []
    for A, B in eliminated:
        B, Et = zero_dof(B, A, E.T, Bx, Gx)
        E = Et.T
        terms.append((A, B))

    check_corners(bcs, vals, tol, prefs.corner_tol_factor)

    order = max(xorder, yorder)
    mm, nn = m - order, n - order
    df1 = max(0, xorder - yorder)
    df2 = max(0, yorder - xorder)
    terms = [(A[:mm, yorder:m-df1], B[:nn, xorder:n-df2]) for A, B in terms]
    E = E[:mm, :nn]
    splits = factorization.parity_splits(tol)
    logger.debug("Discretized PDE on %dx%d coefficients: rank %d, orders "
                 "(%d, %d), splits %s", m, n, len(terms), xorder, yorder, splits)
    return DiscretizedSystem(
        terms=terms, rhs=E, shape=(m, n), orders=(xorder, yorder), bcs=bcs,
        vals=vals, canonical=(Bx, Gx, By, Gy), perms=(perm_x, perm_y),
        splits=splits,
    )
