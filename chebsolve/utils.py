r"""@package chebsolve.utils

General utilities for simplifying certain tasks in Python.
"""

import inspect


__all__ = [
    "lmap",
    "count_positional_args",
]


def lmap(func, *iterables):
    r"""Implementation of `map` that returns a list instead of a generator."""
    return list(map(func, *iterables))


def count_positional_args(func):
    r"""Return the number of positional arguments `func` accepts.

    Returns `None` if the callable takes a variable number of positional
    arguments (i.e. has a ``*args`` parameter) or if its signature cannot be
    inspected.
    """
    try:
        sig = inspect.signature(func)
    except (TypeError, ValueError):
        return None
    count = 0
    for param in sig.parameters.values():
        if param.kind == param.VAR_POSITIONAL:
            return None
        if param.kind in (param.POSITIONAL_ONLY, param.POSITIONAL_OR_KEYWORD):
            count += 1
    return count
