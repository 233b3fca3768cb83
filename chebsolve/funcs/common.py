r"""@package chebsolve.funcs.common

Shared NumPy interoperability for function-like objects.

Classes deriving from _UfuncMixin can be passed to NumPy ufuncs like
`np.sin()` or `np.exp()`. Binary arithmetic ufuncs (which NumPy calls when
e.g. a `numpy.float64` or an array is on the left of an operator) are mapped
back onto the Python operator methods. Unary ufuncs are delegated to
`_apply_ufunc()`.
"""

import operator

import numpy as np


__all__ = []


_BINARY_UFUNCS = {
    np.add: operator.add,
    np.subtract: operator.sub,
    np.multiply: operator.mul,
    np.true_divide: operator.truediv,
    np.power: operator.pow,
}

## Operator method names for `self` on the left and on the right.
_METHODS = {
    np.add: ('__add__', '__radd__'),
    np.subtract: ('__sub__', '__rsub__'),
    np.multiply: ('__mul__', '__rmul__'),
    np.true_divide: ('__truediv__', '__rtruediv__'),
    np.power: ('__pow__', None),
}


def _unwrap(obj):
    r"""Convert NumPy scalars and 0-d arrays to Python numbers."""
    if isinstance(obj, np.generic):
        return obj.item()
    if isinstance(obj, np.ndarray) and obj.ndim == 0:
        return obj.item()
    return obj


class _UfuncMixin(object):
    r"""Mixin letting NumPy ufuncs act on function objects."""

    __array_priority__ = 100

    def __array_ufunc__(self, ufunc, method, *inputs, **kwargs):
        if method != '__call__' or kwargs:
            return NotImplemented
        inputs = [_unwrap(x) for x in inputs]
        if ufunc in _BINARY_UFUNCS:
            if not any(isinstance(x, np.ndarray) for x in inputs):
                return _BINARY_UFUNCS[ufunc](*inputs)
            # Arrays would dispatch back here, so call the methods directly.
            left, right = _METHODS[ufunc]
            if inputs[0] is self:
                return getattr(self, left)(inputs[1])
            if right is None:
                return NotImplemented
            return getattr(self, right)(inputs[0])
        if any(isinstance(x, np.ndarray) for x in inputs):
            return NotImplemented
        if ufunc is np.negative:
            return -inputs[0]
        if len(inputs) == 1:
            return self._apply_ufunc(ufunc)
        return NotImplemented

    def _apply_ufunc(self, ufunc):
        r"""Return the result of applying a unary ufunc to this object."""
        return NotImplemented
