r"""@package chebsolve.numutils

Miscellaneous numerical utilities and helpers.
"""

from contextlib import contextmanager
import warnings

from scipy.linalg import LinAlgWarning
import numpy as np


__all__ = [
    "raise_all_warnings",
    "NumericalError",
    "ResolutionWarning",
]


class NumericalError(Exception):
    r"""Exception raised for problems with numerical evaluation.

    For example, a spectral function may raise this if a sampled function
    produces non-finite values.
    """
    pass


class ResolutionWarning(UserWarning):
    r"""Issued when an adaptive discretization reached its largest size
    without resolving the solution."""
    pass


@contextmanager
def raise_all_warnings():
    r"""Context manager for turning numpy and linear algebra warnings into exceptions.

    For example:
    ```
        with raise_all_warnings():
            np.pi / np.linspace(0, 1, 10)
    ```
    Without the `raise_all_warnings()` context, the above code would just
    issue a warning but otherwise run fine. This allows catching the exception
    to act upon it, e.g.
    ```
        with raise_all_warnings():
            try:
                np.pi / np.linspace(0, 1, 10)
            except FloatingPointError:
                print("Could not compute.")
    ```
    """
    old_settings = np.seterr(divide='raise', over='raise', invalid='raise')
    try:
        with warnings.catch_warnings():
            warnings.filterwarnings('error', category=LinAlgWarning)
            yield
    finally:
        np.seterr(**old_settings)
