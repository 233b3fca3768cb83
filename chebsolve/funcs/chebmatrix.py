r"""@package chebsolve.funcs.chebmatrix

Column of functions representing the unknowns of a system of ODEs.
"""

import numbers

import numpy as np

from .chebfun import Chebfun


__all__ = [
    "Chebmatrix",
]


class Chebmatrix(object):
    r"""Composite of several Chebfun objects on the same domain.

    Supports indexing and iteration over the components, componentwise
    arithmetic with other Chebmatrix objects or scalars, and a norm combining
    the component norms.
    """

    def __init__(self, blocks):
        blocks = list(blocks)
        if not blocks:
            raise ValueError("A Chebmatrix needs at least one component.")
        if not all(isinstance(b, Chebfun) for b in blocks):
            raise TypeError("Chebmatrix components must be Chebfun objects.")
        ## List of the Chebfun components.
        self.blocks = blocks

    @property
    def domain(self):
        r"""Domain shared by all components."""
        return self.blocks[0].domain

    def __len__(self):
        return len(self.blocks)

    def __iter__(self):
        return iter(self.blocks)

    def __getitem__(self, idx):
        return self.blocks[idx]

    def __repr__(self):
        return "Chebmatrix(%d components, domain=%s)" % (len(self), self.domain)

    def __call__(self, x):
        r"""Evaluate all components, returning an array with one row each."""
        return np.array([f(x) for f in self.blocks])

    def _components(self, other):
        if isinstance(other, Chebmatrix):
            if len(other) != len(self):
                raise ValueError("Chebmatrix sizes differ (%d != %d)."
                                 % (len(self), len(other)))
            return other.blocks
        if isinstance(other, numbers.Number):
            return [other] * len(self)
        return None

    def __add__(self, other):
        comps = self._components(other)
        if comps is None:
            return NotImplemented
        return Chebmatrix([f + g for f, g in zip(self.blocks, comps)])

    __radd__ = __add__

    def __sub__(self, other):
        comps = self._components(other)
        if comps is None:
            return NotImplemented
        return Chebmatrix([f - g for f, g in zip(self.blocks, comps)])

    def __neg__(self):
        return Chebmatrix([-f for f in self.blocks])

    def __mul__(self, other):
        if not isinstance(other, numbers.Number):
            return NotImplemented
        return Chebmatrix([other * f for f in self.blocks])

    __rmul__ = __mul__

    def norm(self, p=2):
        r"""Norm of the composite.

        For `p=2`, this is the square root of the sum of squared component
        norms. For `p=np.inf`, it is the largest component norm.
        """
        norms = [f.norm(p) for f in self.blocks]
        if p == np.inf:
            return max(norms)
        return float(np.sqrt(sum(n**2 for n in norms)))

    def simplify(self, tol=None):
        r"""Simplify each component."""
        return Chebmatrix([f.simplify(tol) for f in self.blocks])
