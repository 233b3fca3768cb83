#!/usr/bin/env python3

import unittest
import sys
import math

import numpy as np
from numpy.polynomial import chebyshev as cheb

from testutils import DpkTestCase
from .ultraspherical import convert_mat, diff_mat, mult_mat
from .bases.cheby import ChebyBasis
from .bcs import RobinCondition, DirichletCondition, NeumannCondition, as_conditions
from .matsolve import mat_solve


class TestUltraspherical(DpkTestCase):
    def setUp(self):
        self.n = 12
        self.c = np.array([0.3, -1.0, 0.5, 0.25, -0.125, 0.1, 0.05])
        self.coeffs = np.zeros(self.n)
        self.coeffs[:len(self.c)] = self.c

    def _pad(self, c):
        out = np.zeros(self.n)
        out[:len(c)] = c
        return out

    def test_diff(self):
        n = self.n
        d1 = diff_mat(n, 1).dot(self.coeffs)
        expected = convert_mat(n, 0, 1).dot(self._pad(cheb.chebder(self.c)))
        self.assertListAlmostEqual(d1, expected, delta=1e-13)
        d2 = diff_mat(n, 2, domain=(0, 4)).dot(self.coeffs)
        expected = 0.25 * convert_mat(n, 0, 2).dot(self._pad(cheb.chebder(self.c, 2)))
        self.assertListAlmostEqual(d2, expected, delta=1e-13)

    def test_convert_identity(self):
        S = convert_mat(self.n, 1, 0)
        self.assertListAlmostEqual(S.dot(self.coeffs), self.coeffs, delta=0)

    def test_mult(self):
        a = np.array([1.0, 0.5, -0.25])
        prod = self._pad(cheb.chebmul(a, self.c))
        M0 = mult_mat(a, self.n, 0)
        self.assertListAlmostEqual(M0.dot(self.coeffs), prod, delta=1e-14)
        M1 = mult_mat(a, self.n, 1)
        S = convert_mat(self.n, 0, 1)
        self.assertListAlmostEqual(M1.dot(S.dot(self.coeffs)), S.dot(prod),
                                   delta=1e-13)
        M2 = mult_mat(a, self.n, 2)
        S = convert_mat(self.n, 0, 2)
        self.assertListAlmostEqual(M2.dot(S.dot(self.coeffs)), S.dot(prod),
                                   delta=1e-13)

    def test_mult_constant(self):
        self.assertListAlmostEqual(mult_mat([2.0], 4, 1).diagonal(), [2.0]*4, delta=0)
        self.assertFalse(np.any(mult_mat([0.0, 0.0], 4, 0)))


class TestChebyBasis(DpkTestCase):
    def test_deriv_mat(self):
        basis = ChebyBasis(domain=(0, 2), num=20)
        f = lambda x: np.sin(x)
        coeffs = basis.vals2coeffs_mat().dot(f(basis.pts))
        self.assertListAlmostEqual(basis.deriv_mat(0).dot(coeffs), f(basis.pts),
                                   delta=1e-14)
        self.assertListAlmostEqual(basis.deriv_mat(1).dot(coeffs), np.cos(basis.pts),
                                   delta=1e-12)
        self.assertListAlmostEqual(basis.deriv_mat(2).dot(coeffs), -np.sin(basis.pts),
                                   delta=1e-10)
        self.assertListAlmostEqual(basis.value_diff_mat().dot(f(basis.pts)),
                                   np.cos(basis.pts), delta=1e-12)
        self.assertAlmostEqual(basis.interpolation_row(0.3).dot(f(basis.pts)),
                               math.sin(0.3), delta=1e-14)

    def test_operator_matrix(self):
        # Solve u'' + u = 0 with u(0) = 0, u(pi/2) = 1 (exact: sin).
        basis = ChebyBasis(domain=(0, math.pi/2), num=24)
        L = basis.construct_operator_matrix([1, None, lambda x: 1.0 + 0*x])
        f = np.zeros(basis.num)
        L[0] = DirichletCondition(math.pi/2).functional(basis.num, basis.domain)
        L[-1] = DirichletCondition(0.0).functional(basis.num, basis.domain)
        f[0] = 1.0
        sol = basis.solution_function(mat_solve(L, f))
        space = np.linspace(0, math.pi/2, 15)
        self.assertListAlmostEqual(sol(space), np.sin(space), delta=1e-13)
        sol_mp = basis.solution_function(mat_solve(L, f, method='mp.lu_solve'))
        self.assertListAlmostEqual(sol_mp(space), np.sin(space), delta=1e-12)


class TestBCs(DpkTestCase):
    def test_functional(self):
        c = np.array([0.5, 1.0, -2.0, 0.75])
        basis_dom = (-1.0, 3.0)
        row = RobinCondition(3.0, alpha=2.0, beta=-1.0).functional(4, basis_dom)
        t = 1.0
        expected = 2.0*cheb.chebval(t, c) - 0.5*cheb.chebval(t, cheb.chebder(c))
        self.assertAlmostEqual(row.dot(c), expected, delta=1e-13)
        row = NeumannCondition(-1.0).functional(4, basis_dom)
        self.assertAlmostEqual(row.dot(c), 0.5*cheb.chebval(-1.0, cheb.chebder(c)),
                               delta=1e-13)

    def test_value_coeffs(self):
        cond = DirichletCondition(value=lambda y: y**2)
        self.assertListAlmostEqual(cond.value_coeffs(4, (-1, 1)), [0.5, 0, 0.5, 0],
                                   delta=1e-14)
        self.assertListAlmostEqual(DirichletCondition(value=3).value_coeffs(3, (0, 1)),
                                   [3, 0, 0], delta=0)

    def test_as_conditions(self):
        conds = as_conditions([0, NeumannCondition()])
        self.assertEqual(len(conds), 2)
        self.assertIsType(conds[0], DirichletCondition)
        self.assertEqual(as_conditions(None), [])


def run_tests():
    suite = unittest.TestLoader().loadTestsFromModule(sys.modules[__name__])
    return len(unittest.TextTestRunner(verbosity=2).run(suite).failures)


if __name__ == '__main__':
    unittest.main()
