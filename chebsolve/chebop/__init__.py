r"""@package chebsolve.chebop

Spectral solver for (nonlinear) ODE boundary value problems.

A problem is described by a Chebop and solved with solvebvp() (or
Chebop.solve()). Nonlinear problems are linearized by local automatic
differentiation (ad, linearize) and solved with a damped Newton iteration
(newton). The linear problems are discretized by collocation or the
ultraspherical method (discretize).


@b Examples

```
N = Chebop(lambda x, u: u.diff(2) + np.sin(u), domain=(0, 2),
           lbc=0, rbc=1)
u, info = N.solve(0, prefs=BVPPrefs(discretization='ultraS'))
print(info.iterations, info.error)
```
"""

from .chebop import Chebop, NumVarsWarning, infer_num_vars
from .ad import ADFun, ADScalar
from .linearize import linearize, LinearizedProblem
from .discretize import (CollocationDiscretization,
                         UltrasphericalDiscretization, solve_linearized)
from .display import NewtonDisplay, PrintDisplay, CallbackDisplay
from .info import SolveInfo
from .newton import (NonlinearBVPSolver, NoConvergence, StepLimitExceeded,
                     DampingFailed, ConvergenceWarning)
from .solvebvp import solvebvp, fit_bcs, ShapeWarning, DimensionMismatchError
