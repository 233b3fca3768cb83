r"""@package chebsolve

Chebyshev spectral methods for functions and differential equations.

The subpackages are:
    * funcs: Chebfun, Chebfun2 and Chebmatrix function representations
    * spectral: bases, ultraspherical operators and boundary conditions
    * chebop2: low rank ultraspherical solver for linear PDEs on rectangles
    * chebop: Newton-based solver for nonlinear ODE boundary value problems
"""

from .funcs import Chebfun, Chebfun2, Chebmatrix
from .prefs import BVPPrefs, Cheb2Prefs
from .spectral import (RobinCondition, DirichletCondition, NeumannCondition,
                       NDSolveError)
from .chebop import Chebop, solvebvp
from .chebop2 import Chebop2
