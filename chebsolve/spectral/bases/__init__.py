r"""@package chebsolve.spectral.bases

Spectral bases for the collocation discretization.
"""

from .cheby import ChebyBasis
