r"""@package chebsolve.funcs

Function representations: Chebfun (1-D), Chebfun2 (2-D) and Chebmatrix.
"""

from .chebfun import Chebfun, diff
from .chebfun2 import Chebfun2, chebpts2, UnrecognizedTechnologyError
from .chebmatrix import Chebmatrix
from .chebtech import chebpts
