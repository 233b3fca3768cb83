r"""@package chebsolve.spectral

Basis and grid toolkit: collocation bases, ultraspherical operators,
boundary condition functionals and dense solvers.
"""

from .bases import ChebyBasis
from .bcs import RobinCondition, DirichletCondition, NeumannCondition, NDSolveError
from .ultraspherical import convert_mat, diff_mat, mult_mat
from .matsolve import mat_solve
