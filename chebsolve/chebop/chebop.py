r"""@package chebsolve.chebop.chebop

Description of (nonlinear) boundary value problems.

A Chebop collects the operator, the domain, boundary conditions and an
optional initial guess of an ODE boundary value problem. It is treated as an
immutable value: the solvers never modify it and copy() creates modified
versions.

@b Examples

```
    # u'' + exp(u) = 0 on [-1, 1] with u(-1) = u(1) = 0
    N = Chebop(lambda x, u: u.diff(2) + np.exp(u), domain=(-1, 1),
               lbc=0, rbc=0)
    u, info = N.solve(0)

    # A system u' = v, v' = -u with u(0) = 0, v(0) = 1
    N = Chebop(lambda x, u, v: [u.diff() - v, v.diff() + u],
               domain=(0, 2), lbc=[0, 1])
```
"""

import ast
import inspect
import textwrap
import warnings

from ..funcs.chebfun import Chebfun
from ..funcs.chebmatrix import Chebmatrix
from ..utils import count_positional_args


__all__ = [
    "Chebop",
    "NumVarsWarning",
    "infer_num_vars",
]


class NumVarsWarning(UserWarning):
    r"""Issued when the number of unknowns of an operator could not be determined."""
    pass


class Chebop(object):
    r"""Operator of a boundary value problem together with its conditions.

    The operator `op` may have one of the signatures
        * `op(u)`: autonomous scalar (or system via `u[0], u[1], ...`),
        * `op(x, u)`: scalar problem (or system via indexing `u`),
        * `op(x, u1, ..., uk)`: system of `k` unknowns.
    It returns the left hand side of the equation(s) as a single expression
    or a list with one entry per equation.

    Boundary conditions `lbc` and `rbc` are imposed at the left and right
    end of the domain. Each may be
        * `None`,
        * a number (Dirichlet condition for every unknown),
        * a list of numbers (Dirichlet condition per unknown, `None` skips),
        * a spectral.bcs.RobinCondition (or list of them; scalar problems),
        * a callable taking the unknowns (like `op` without `x`) and
          returning an expression (or list of expressions) which should
          vanish at the respective end.
    The general condition `bc` is a callable `bc(x, u1, ..., uk)` returning a
    list of point evaluations/integrals (ADScalar expressions such as
    `u(0) - 1` or `u.sum()`) which should vanish, or a list of
    RobinCondition objects with explicit points.
    """

    def __init__(self, op, domain=(-1, 1), lbc=None, rbc=None, bc=None,
                 init=None, num_vars=None):
        a, b = map(float, domain)
        if not b > a:
            raise ValueError("Invalid domain: %s" % (domain,))
        ## The operator callable.
        self.op = op
        ## Interval `(a, b)` of the problem.
        self.domain = (a, b)
        ## Condition(s) at `x = a`.
        self.lbc = lbc
        ## Condition(s) at `x = b`.
        self.rbc = rbc
        ## General conditions.
        self.bc = bc
        ## Initial guess (Chebfun, Chebmatrix, callable or list of these).
        self.init = init
        ## Explicitly given number of unknowns (or `None`).
        self.num_vars = num_vars

    def copy(self, **changes):
        r"""Return a new Chebop with some attributes replaced."""
        kw = dict(op=self.op, domain=self.domain, lbc=self.lbc, rbc=self.rbc,
                  bc=self.bc, init=self.init, num_vars=self.num_vars)
        kw.update(changes)
        return Chebop(**kw)

    def __repr__(self):
        return "Chebop(domain=%s, num_vars=%s)" % (self.domain, self.num_vars)

    @property
    def arity(self):
        r"""Number of positional arguments of the operator."""
        arity = count_positional_args(self.op)
        if arity is None:
            raise TypeError("Cannot determine the arguments of the operator.")
        return arity

    def autonomous(self, num_vars=None):
        r"""Return an equivalent Chebop whose operator takes `(x, u...)`.

        Operators with a single argument are wrapped. The returned object is
        a new Chebop; this one is left unchanged.

        @param num_vars
            Number of unknowns if already known. Otherwise, count_vars() is
            used.
        """
        if self.arity != 1:
            return self
        if num_vars is None:
            num_vars = self.count_vars()
        op = self.op
        return self.copy(op=lambda x, u: op(u), num_vars=num_vars)

    def count_vars(self):
        r"""Number of unknown functions, see infer_num_vars()."""
        return infer_num_vars(self.op, self.arity, self.num_vars)

    def call_op(self, x, unknowns):
        r"""Evaluate the operator for `x` and a list of unknowns.

        @return A list with one entry per equation.
        """
        arity = self.arity
        if arity == 1:
            args = (unknowns[0] if len(unknowns) == 1 else unknowns,)
        elif arity == 2:
            args = (x, unknowns[0] if len(unknowns) == 1 else unknowns)
        else:
            args = (x,) + tuple(unknowns)
        return _as_list(self.op(*args))

    @staticmethod
    def call_bc_func(func, x, unknowns):
        r"""Evaluate a condition callable.

        Supported signatures are `func(u)` (with `u` being a list for
        systems), `func(u1, ..., uk)`, `func(x, u)` and `func(x, u1, ..., uk)`.

        @return A list of the returned expressions.
        """
        nargs = count_positional_args(func)
        k = len(unknowns)
        if nargs == 1:
            args = (_single(unknowns),)
        elif nargs == 2 and k != 2:
            args = (x, _single(unknowns))
        elif nargs == k:
            args = tuple(unknowns)
        elif nargs == k + 1:
            args = (x,) + tuple(unknowns)
        else:
            raise TypeError("Condition callable takes %s arguments for %d "
                            "unknowns." % (nargs, k))
        return _as_list(func(*args))

    def apply(self, u):
        r"""Apply the operator to a function (or Chebmatrix of functions).

        @return A Chebfun for single equations, a Chebmatrix otherwise.
        """
        if isinstance(u, Chebfun):
            u = Chebmatrix([u])
        x = Chebfun.identity(self.domain)
        out = self.call_op(x, list(u))
        out = [o if isinstance(o, Chebfun) else Chebfun.constant(o, self.domain)
               for o in out]
        return out[0] if len(out) == 1 else Chebmatrix(out)

    __call__ = apply

    def solve(self, rhs=0, prefs=None, display=None):
        r"""Solve `N(u) = rhs`, see solvebvp.solvebvp()."""
        from .solvebvp import solvebvp
        return solvebvp(self, rhs, prefs=prefs, display=display)


def _single(unknowns):
    return unknowns[0] if len(unknowns) == 1 else unknowns


def _as_list(result):
    if isinstance(result, (list, tuple)):
        return list(result)
    return [result]


def infer_num_vars(op, arity=None, num_vars=None):
    r"""Determine the number of unknown functions of an operator.

    Operators taking more than two arguments have one unknown per argument
    after `x`. Otherwise, an explicitly given `num_vars` is used. As a last
    resort, the source code of the operator is parsed and the largest
    constant index `u[k]` applied to the unknown's argument name determines
    the count. If the source is not available or cannot be parsed, a
    NumVarsWarning is issued and `1` is returned.
    """
    if arity is None:
        arity = count_positional_args(op)
    if arity is not None and arity > 2:
        return arity - 1
    if num_vars is not None:
        return int(num_vars)
    node = _find_function_node(op, arity)
    if node is None:
        warnings.warn(
            "Could not determine the number of unknowns of the operator. "
            "Assuming a single unknown; pass `num_vars` to be explicit.",
            NumVarsWarning
        )
        return 1
    args = node.args.args
    uname = args[-1].arg
    indices = [-1]
    for sub in ast.walk(node.body if isinstance(node, ast.Lambda) else node):
        if not isinstance(sub, ast.Subscript):
            continue
        if not (isinstance(sub.value, ast.Name) and sub.value.id == uname):
            continue
        if (isinstance(sub.slice, ast.Constant)
                and isinstance(sub.slice.value, int)):
            indices.append(sub.slice.value)
    return max(indices) + 1 if max(indices) >= 0 else 1


def _parse_source(source):
    r"""Parse source text, trimming it to a lambda expression if necessary."""
    try:
        return ast.parse(source)
    except SyntaxError:
        pass
    start = source.find('lambda')
    while start >= 0:
        for end in range(len(source), start, -1):
            try:
                return ast.parse(source[start:end].strip(), mode='eval')
            except SyntaxError:
                continue
        start = source.find('lambda', start + 1)
    return None


def _find_function_node(op, arity):
    try:
        source = textwrap.dedent(inspect.getsource(op))
    except (OSError, TypeError):
        return None
    tree = _parse_source(source)
    if tree is None or not arity:
        return None
    names = list(op.__code__.co_varnames[:arity])
    for node in ast.walk(tree):
        if isinstance(node, (ast.Lambda, ast.FunctionDef)):
            if [a.arg for a in node.args.args] == names:
                return node
    return None
