r"""@package chebsolve.chebop2.coeffs

Tagged coefficient variants of PDE operators.

Every entry of the coefficient matrix of a Chebop2 is one of:
    * EmptyCoeff: absent term,
    * ScalarCoeff: constant coefficient,
    * FieldCoeff: variable coefficient given by a function (a Chebfun2 for
      entries of the full operator or a Chebfun for entries of the 1-D
      factors produced by the low rank decomposition).

The classes share a small interface so that callers never need to inspect
the type of an entry: low_rank_terms() (used by the decomposition) and
ultraspherical_term() (used to build the matrix equation).
"""

import numbers

import numpy as np

from ..funcs.chebfun import Chebfun
from ..funcs.chebfun2 import Chebfun2
from ..spectral.ultraspherical import convert_mat, diff_mat, mult_mat


__all__ = [
    "EmptyCoeff",
    "ScalarCoeff",
    "FieldCoeff",
    "as_coeff",
]


class EmptyCoeff(object):
    r"""An absent term of the operator."""

    is_empty = True

    def low_rank_terms(self, tol):
        return []

    def scaled(self, factor):
        return self

    def ultraspherical_term(self, n, order, total_order, domain):
        return None

    def __repr__(self):
        return "EmptyCoeff()"


class ScalarCoeff(object):
    r"""A constant coefficient."""

    is_empty = False

    def __init__(self, value):
        ## The constant value.
        self.value = float(value)

    def low_rank_terms(self, tol):
        r"""Scalars form a single rank-1 term with a unit partner."""
        if abs(self.value) <= tol:
            return []
        return [(self.value, 1.0)]

    def scaled(self, factor):
        return ScalarCoeff(factor * self.value)

    def ultraspherical_term(self, n, order, total_order, domain):
        r"""Matrix `value * S D_order` in the \f$ C^{(total\_order)} \f$ basis."""
        if self.value == 0:
            return None
        S = convert_mat(n, order, total_order - order)
        return self.value * (S @ diff_mat(n, order, domain)).toarray()

    def __repr__(self):
        return "ScalarCoeff(%r)" % self.value


class FieldCoeff(object):
    r"""A variable coefficient given by a function."""

    is_empty = False

    def __init__(self, field):
        ## The coefficient function (Chebfun2 or Chebfun).
        self.field = field

    def low_rank_terms(self, tol):
        r"""The terms of the CDR decomposition of a 2-D field.

        Returns a list of `(column, row)` pairs, with the coupling values
        absorbed into the columns.
        """
        if abs(self.field.vscale()) <= tol:
            return []
        cols, d, rows = self.field.cdr()
        return [(c * s, r) for c, s, r in zip(cols, d, rows)]

    def scaled(self, factor):
        return FieldCoeff(factor * self.field)

    def ultraspherical_term(self, n, order, total_order, domain):
        r"""Matrix `S M[f] D_order` for a 1-D coefficient function `f`."""
        S = convert_mat(n, order, total_order - order)
        M = mult_mat(self.field.coeffs, n, order)
        D = diff_mat(n, order, domain)
        return S @ (M @ D)

    def __repr__(self):
        return "FieldCoeff(%r)" % (self.field,)


def as_coeff(obj, domain=None):
    r"""Convert a user supplied coefficient to one of the tagged variants.

    Args:
        obj: `None`, a number, a Chebfun/Chebfun2, a callable `f(x, y)` (which
            requires `domain`) or an already tagged coefficient.
        domain: Rectangle `(a, b, c, d)` used to sample callables.
    """
    if isinstance(obj, (EmptyCoeff, ScalarCoeff, FieldCoeff)):
        return obj
    if obj is None:
        return EmptyCoeff()
    if isinstance(obj, numbers.Number):
        return ScalarCoeff(obj)
    if isinstance(obj, (Chebfun, Chebfun2)):
        return FieldCoeff(obj)
    if callable(obj):
        if domain is None:
            raise ValueError("Need a domain to sample coefficient functions.")
        return FieldCoeff(Chebfun2.from_function(obj, domain))
    raise TypeError("Unsupported operator coefficient: %r" % (obj,))


def coeff_matrix(entries, domain=None):
    r"""Convert a nested list of coefficients to an object array of variants."""
    rows = [list(row) if isinstance(row, (list, tuple, np.ndarray)) else [row]
            for row in entries]
    width = max(len(row) for row in rows)
    out = np.empty((len(rows), width), dtype=object)
    for i, row in enumerate(rows):
        for j in range(width):
            out[i, j] = as_coeff(row[j] if j < len(row) else None, domain)
    return out
