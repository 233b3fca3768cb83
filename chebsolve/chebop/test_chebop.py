#!/usr/bin/env python3

import unittest
import sys
import warnings

import numpy as np

from testutils import DpkTestCase, slowtest
from ..funcs.chebfun import Chebfun
from ..funcs.chebmatrix import Chebmatrix
from ..prefs import BVPPrefs
from ..spectral.bases.cheby import ChebyBasis
from ..spectral.bcs import NeumannCondition
from .ad import ADFun
from .chebop import Chebop, NumVarsWarning, infer_num_vars
from .linearize import linearize
from .newton import ConvergenceWarning, StepLimitExceeded
from .solvebvp import solvebvp, fit_bcs, ShapeWarning, DimensionMismatchError


class TestAD(DpkTestCase):
    def setUp(self):
        self.basis = ChebyBasis((-1, 1), 17)
        self.x = self.basis.pts
        self.u = ADFun.variable(self.basis, np.sin(self.x), 0)

    def test_linear_combination(self):
        f = 3 * self.u.diff(2) - self.x * self.u + 1.0
        self.assertFalse(f.nonlinear)
        self.assertEqual(f.order(0), 2)
        c = f.jac[0]
        self.assertListAlmostEqual(c[0], -self.x, delta=1e-14)
        self.assertListAlmostEqual(c[1], np.zeros(17), delta=1e-12)
        self.assertListAlmostEqual(c[2], 3 * np.ones(17), delta=1e-14)

    def test_product_rule(self):
        f = self.u**2 + np.exp(self.u)
        self.assertTrue(f.nonlinear)
        v = np.sin(self.x)
        self.assertListAlmostEqual(f.values, v**2 + np.exp(v), delta=1e-13)
        self.assertListAlmostEqual(f.jac[0][0], 2*v + np.exp(v), delta=1e-13)

    def test_derivative_of_coefficients(self):
        # d/dx (x u) = u + x u'
        f = (self.x * self.u).diff()
        self.assertListAlmostEqual(f.jac[0][0], np.ones(17), delta=1e-12)
        self.assertListAlmostEqual(f.jac[0][1], self.x, delta=1e-12)
        self.assertListAlmostEqual(f.values, np.sin(self.x) + self.x*np.cos(self.x),
                                   delta=1e-10)

    def test_point_evaluation(self):
        s = self.u.diff()(0.5)
        self.assertAlmostEqual(s.value, np.cos(0.5), delta=1e-10)
        T = np.polynomial.Chebyshev.basis
        self.assertListAlmostEqual(s.rows[0], [T(k).deriv()(0.5) for k in range(17)],
                                   delta=1e-10)
        self.assertFalse(s.nonlinear)
        self.assertTrue((s * s).nonlinear)

    def test_integral(self):
        s = (self.u * self.x).sum()
        self.assertAlmostEqual(s.value, 2 * (np.sin(1) - np.cos(1)), delta=1e-12)
        self.assertTrue(s.depends)
        self.assertFalse(s.nonlinear)


class TestChebop(DpkTestCase):
    def test_infer_num_vars(self):
        op = lambda x, u: [u[0].diff() - u[1], u[1].diff() + u[0]]
        self.assertEqual(infer_num_vars(op), 2)
        self.assertEqual(infer_num_vars(lambda x, u, v, w: [u, v, w]), 3)
        self.assertEqual(infer_num_vars(lambda x, u: u.diff(), num_vars=4), 4)
        self.assertEqual(infer_num_vars(lambda u: u.diff(2) + u), 1)
        def op2(x, y):
            return [y[0] - y[2], y[1], y[2]]
        self.assertEqual(infer_num_vars(op2), 3)

    def test_infer_num_vars_without_source(self):
        op = eval("lambda x, u: u")
        with self.assertWarns(NumVarsWarning):
            self.assertEqual(infer_num_vars(op), 1)

    def test_num_vars_warning_issued_once(self):
        N = Chebop(eval("lambda u: u.diff(2) + u"), lbc=0, rbc=1)
        with warnings.catch_warnings(record=True) as caught:
            warnings.simplefilter("always")
            u, _info = solvebvp(N, 0)
        self.assertEqual(
            len([w for w in caught if issubclass(w.category, NumVarsWarning)]),
            1
        )
        self.assertAlmostEqual(u(1.0), 1.0, delta=1e-10)

    def test_copy_is_independent(self):
        N = Chebop(lambda u: u.diff(), lbc=1)
        M = N.autonomous()
        self.assertIsNot(M, N)
        self.assertEqual(N.arity, 1)
        self.assertEqual(M.arity, 2)
        self.assertEqual(N.copy(rbc=2).rbc, 2)
        self.assertIsNone(N.rbc)

    def test_apply(self):
        N = Chebop(lambda x, u: u.diff(2) + x * u, domain=(0, 2))
        f = N(Chebfun.from_function(lambda x: x**3, (0, 2)))
        self.assertAlmostEqual(f(1.5), 6*1.5 + 1.5**4, delta=1e-12)

    def test_linearity_flags(self):
        N = Chebop(lambda x, u: u.diff(2) + u**2, lbc=0, rbc=lambda u: u.diff())
        u = Chebmatrix([Chebfun.from_function(np.cos)])
        lin = linearize(N, u, 17, [Chebfun.constant(0.0)])
        self.assertEqual(lin.flags, dict(op=False, lbc=True, rbc=True, bc=True))
        self.assertFalse(lin.is_linear)
        self.assertEqual(lin.equation_orders(), [2])
        self.assertEqual(lin.condition_rows().shape, (2, 17))
        self.assertAlmostEqual(lin.condition_values()[1], -np.sin(1), delta=1e-12)


class TestLinear(DpkTestCase):
    def _both(self, N, rhs, exact, tol, domain=(-1, 1)):
        for disc in ('collocation', 'ultraspherical'):
            u, info = solvebvp(N, rhs, prefs=BVPPrefs(discretization=disc))
            self.assertTrue(info.is_linear)
            self.assertTrue(info.converged)
            self.assertFunctionAlmostEqual(u, exact, domain, delta=tol)

    def test_exponential(self):
        N = Chebop(lambda x, u: u.diff() - u, lbc=np.exp(-1))
        self._both(N, 0, np.exp, 1e-12)

    def test_copied_prefs_alias(self):
        N = Chebop(lambda x, u: u.diff(2) + u, lbc=0, rbc=1)
        prefs = BVPPrefs().copy(discretization='ultraS')
        u, info = solvebvp(N, 0, prefs=prefs)
        self.assertEqual(info.discretization, 'ultraspherical')
        self.assertFunctionAlmostEqual(
            u, lambda x: np.sin(x + 1) / np.sin(2), delta=1e-12
        )

    def test_oscillator(self):
        N = Chebop(lambda x, u: u.diff(2) + u, domain=(0, np.pi/2), lbc=0, rbc=1)
        self._both(N, 0, np.sin, 1e-11, domain=(0, np.pi/2))

    def test_variable_coefficient(self):
        N = Chebop(lambda x, u: u.diff(2) - x * u, lbc=np.sin(-1), rbc=np.sin(1))
        self._both(N, lambda x: -np.sin(x) - x * np.sin(x), np.sin, 1e-11)

    def test_neumann(self):
        N = Chebop(lambda x, u: u.diff(2), lbc=NeumannCondition(value=3), rbc=1)
        self._both(N, lambda x: 6*x, lambda x: x**3, 1e-11)

    def test_integral_condition(self):
        N = Chebop(lambda x, u: u.diff(2), lbc=1,
                   bc=lambda x, u: [u.sum() - 2.0/3.0])
        self._both(N, 2, lambda x: x**2, 1e-11)

    def test_boundary_conditions_satisfied(self):
        N = Chebop(lambda x, u: u.diff(2) + 4*u.diff() + u, domain=(0, 3),
                   lbc=2, rbc=lambda u: u.diff() + u - 1)
        u, info = N.solve(lambda x: np.cos(x))
        self.assertAlmostEqual(u(0.0), 2.0, delta=1e-11)
        self.assertAlmostEqual(u.diff()(3.0) + u(3.0), 1.0, delta=1e-10)
        self.assertLessEqual(info.residual, 1e-8)

    def test_system(self):
        N = Chebop(lambda x, u, v: [u.diff() - v, v.diff() + u], domain=(0, 2),
                   lbc=[0, 1])
        for disc in ('collocation', 'ultraspherical'):
            w, info = solvebvp(N, 0, prefs=BVPPrefs(discretization=disc))
            self.assertIsType(w, Chebmatrix)
            self.assertEqual(len(w), 2)
            self.assertFunctionAlmostEqual(w[0], np.sin, (0, 2), delta=1e-11)
            self.assertFunctionAlmostEqual(w[1], np.cos, (0, 2), delta=1e-11)

    def test_indexed_system(self):
        N = Chebop(lambda x, u: [u[0].diff() - u[1], u[1].diff() + u[0]],
                   domain=(0, 2), lbc=[0, 1])
        w, _info = N.solve([0, 0])
        self.assertFunctionAlmostEqual(w[1], np.cos, (0, 2), delta=1e-11)


class TestNonlinear(DpkTestCase):
    def setUp(self):
        self.exact = lambda x: (1 - x**2) / 2
        self.N = Chebop(lambda x, u: u.diff(2) + u**2, lbc=0, rbc=0)
        self.rhs = lambda x: -1 + (1 - x**2)**2 / 4

    def test_quadratic(self):
        for disc in ('collocation', 'ultraspherical'):
            u, info = solvebvp(self.N, self.rhs,
                               prefs=BVPPrefs(discretization=disc))
            self.assertFalse(info.is_linear)
            self.assertTrue(info.converged)
            self.assertLessEqual(info.iterations, 20)
            self.assertFunctionAlmostEqual(u, self.exact, delta=1e-9)
            tail = info.norm_delta[-3:]
            self.assertTrue(all(b < a for a, b in zip(tail, tail[1:])))

    def test_autonomous(self):
        N = Chebop(lambda u: u.diff(2) + u**2, lbc=0, rbc=0)
        u, info = N.solve(self.rhs)
        self.assertIsType(u, Chebfun)
        self.assertFunctionAlmostEqual(u, self.exact, delta=1e-9)

    def test_undamped(self):
        u, info = solvebvp(self.N, self.rhs, prefs=BVPPrefs(damped=False))
        self.assertTrue(info.converged)
        self.assertListAlmostEqual(info.lambdas, [1.0] * info.iterations)
        self.assertFunctionAlmostEqual(u, self.exact, delta=1e-9)

    def test_sine_nonlinearity(self):
        N = Chebop(lambda x, u: u.diff(2) + np.sin(u), domain=(0, 1),
                   lbc=0, rbc=1, init=lambda x: x)
        with warnings.catch_warnings():
            warnings.simplefilter("error", ConvergenceWarning)
            u, info = N.solve(0)
        self.assertTrue(info.converged)
        self.assertIn(info.reason, ("error estimate", "residual"))
        self.assertListAlmostEqual(info.lambdas[1:],
                                   [1.0] * (info.iterations - 1))
        residual = u.diff(2) + np.sin(u)
        self.assertLessEqual(residual.norm(np.inf), 1e-8)
        self.assertAlmostEqual(u(1.0), 1.0, delta=1e-10)

    def test_nonlinear_system(self):
        N = Chebop(lambda x, u, v: [u.diff() - v**2, v.diff() - 1], lbc=[0, -1])
        w, info = N.solve(0)
        self.assertTrue(info.converged)
        self.assertFunctionAlmostEqual(w[0], lambda x: (x**3 + 1) / 3, delta=1e-10)
        self.assertFunctionAlmostEqual(w[1], lambda x: x, delta=1e-10)

    def test_nonlinear_boundary_condition(self):
        N = Chebop(lambda x, u: u.diff(2), lbc=lambda u: u**2 - 4, rbc=3,
                   init=lambda x: 2 + x)
        u, info = N.solve(0)
        self.assertFalse(info.flags['lbc'])
        self.assertTrue(info.flags['op'])
        self.assertFunctionAlmostEqual(u, lambda x: 2.5 + 0.5*x, delta=1e-10)

    def test_step_limit(self):
        prefs = BVPPrefs(max_iter=1)
        with self.assertWarns(ConvergenceWarning):
            u, info = solvebvp(self.N, self.rhs, prefs=prefs)
        self.assertFalse(info.converged)
        self.assertEqual(info.reason, "step limit")
        self.assertEqual(info.iterations, 1)
        with self.assertRaises(StepLimitExceeded):
            solvebvp(self.N, self.rhs, prefs=prefs.copy(disp=True))

    def test_display(self):
        calls = []
        _u, info = solvebvp(self.N, self.rhs,
                            display=lambda it, u, info: calls.append(it))
        self.assertEqual(calls, list(range(info.iterations)))

    def test_fit_bcs(self):
        N = Chebop(lambda x, u: u.diff(2) + u**2, lbc=1, rbc=2).autonomous()
        u0 = Chebmatrix([Chebfun.constant(0.0)])
        u = fit_bcs(N, u0, [Chebfun.constant(0.0)], BVPPrefs())
        self.assertAlmostEqual(u[0](-1.0), 1.0, delta=1e-13)
        self.assertAlmostEqual(u[0](1.0), 2.0, delta=1e-13)
        self.assertLessEqual(len(u[0]), 2)

    @slowtest
    def test_convergence_history(self):
        N = Chebop(lambda x, u: 0.01 * u.diff(2) - u**3 + u, lbc=-1, rbc=1,
                   init=lambda x: x)
        u, info = N.solve(0)
        self.assertTrue(info.converged)
        self.assertAlmostEqual(u(0.0), 0.0, delta=1e-8)


class TestRightHandSide(DpkTestCase):
    def setUp(self):
        self.N = Chebop(lambda x, u, v: [u.diff() - v, v.diff() + u],
                        domain=(0, 2), lbc=[0, 1])

    def test_transposed(self):
        with self.assertWarns(ShapeWarning):
            w, _info = solvebvp(self.N, np.array([[0.0, 0.0]]))
        self.assertFunctionAlmostEqual(w[0], np.sin, (0, 2), delta=1e-11)

    def test_column(self):
        w, _info = solvebvp(self.N, np.zeros((2, 1)))
        self.assertFunctionAlmostEqual(w[1], np.cos, (0, 2), delta=1e-11)

    def test_mismatch(self):
        with self.assertRaises(DimensionMismatchError):
            solvebvp(self.N, np.zeros((3, 1)))
        with self.assertRaises(DimensionMismatchError):
            solvebvp(self.N, [Chebfun.constant(0.0, (0, 2))])
        with self.assertRaises(DimensionMismatchError):
            solvebvp(self.N.copy(init=[lambda x: x]), 0)

    def test_operator_mismatch(self):
        N = Chebop(lambda x, u, v: [u.diff() - v], lbc=[0, 1])
        with self.assertRaises(DimensionMismatchError):
            N.solve(0)


def run_tests():
    suite = unittest.TestLoader().loadTestsFromModule(sys.modules[__name__])
    return len(unittest.TextTestRunner(verbosity=2).run(suite).failures)


if __name__ == '__main__':
    unittest.main()
