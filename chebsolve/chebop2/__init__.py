r"""@package chebsolve.chebop2

Ultraspherical spectral solver for linear PDEs on rectangles.

The operator is split into a sum of tensor products of 1-D operators by a
low rank decomposition of its coefficients (lowrank). Each 1-D operator is
discretized with the ultraspherical method, the boundary conditions are
eliminated (bcelim) and the resulting generalized Sylvester equation is
solved (sylvester).


@b Examples

Solving the heat equation \f$ u_t = u_{xx} \f$ (with `y` taking the role of
time) on \f$ [-1, 1] \times [0, 1] \f$ with homogeneous Dirichlet conditions
and initial data \f$ \sin(\pi x) \f$:

```
N = Chebop2([[0, 1], [0, 0], [-1, 0]], domain=(-1, 1, 0, 1),
            lbc=0, rbc=0, dbc=lambda x: np.sin(np.pi*x))
u = N.solve(0)
u(0.5, 0.1)   # approx. exp(-pi**2 * 0.1)
```

@b References

[1] Townsend, A. and Olver, S. "The automatic solution of partial
    differential equations using a global spectral method." Journal of
    Computational Physics 299 (2015): 106-123.
"""

from .operator import Chebop2
from .lowrank import decompose_operator, LowRankFactorization, DegenerateOperatorError
from .bcelim import (canonical_bc, nonsingular_permute, zero_dof, check_corners,
                     recover_solution, LinearlyDependentBCsError,
                     BoundaryConditionWarning)
from .discretisation import construct_discretisation, IllPosedError
from .sylvester import solve_matrix_equation
