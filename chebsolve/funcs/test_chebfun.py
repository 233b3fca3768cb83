#!/usr/bin/env python3

import unittest
import sys
import math

import numpy as np

from testutils import DpkTestCase
from ..utils import lmap
from .chebfun import Chebfun, diff
from .chebmatrix import Chebmatrix
from . import chebtech


class TestChebtech(DpkTestCase):
    def test_transform_inverse(self):
        coeffs = np.array([1.0, -0.5, 0.25, 0.125, -0.0625])
        values = chebtech.coeffs2vals(coeffs)
        pts = chebtech.chebpts(len(coeffs))
        self.assertListAlmostEqual(
            values, np.polynomial.chebyshev.chebval(pts, coeffs), delta=1e-14
        )
        self.assertListAlmostEqual(chebtech.vals2coeffs(values), coeffs,
                                   delta=1e-14)

    def test_points_descending(self):
        pts = chebtech.chebpts(5, (0, 2))
        self.assertListAlmostEqual(pts, [2.0, 1.0+math.sqrt(0.5), 1.0,
                                         1.0-math.sqrt(0.5), 0.0], delta=1e-14)

    def test_endpoint_derivative(self):
        T = np.polynomial.Chebyshev.basis(7)
        for n in range(4):
            self.assertAlmostEqual(chebtech.endpoint_derivative(7, n),
                                   T.deriv(n)(1.0), delta=1e-9)
            self.assertAlmostEqual(chebtech.endpoint_derivative(7, n, right=False),
                                   T.deriv(n)(-1.0), delta=1e-9)

    def test_resolved(self):
        self.assertTrue(chebtech.is_resolved([1.0, 0.5, 0.25, 0, 0, 0, 0, 0], 1e-14))
        self.assertFalse(chebtech.is_resolved([1.0, 0.5, 0.25, 0.1], 1e-14))
        self.assertEqual(chebtech.chop_length([1.0, 0.5, 1e-20, 0.0], 1e-14), 2)


class TestChebfun(DpkTestCase):
    def test_construct_and_evaluate(self):
        f = Chebfun.from_function(lambda x: np.exp(np.sin(x)), domain=(0, 3))
        space = np.linspace(0, 3, 20)
        self.assertListAlmostEqual(f(space), lmap(lambda x: math.exp(math.sin(x)), space),
                                   delta=1e-13)
        self.assertLess(len(f), 60)

    def test_diff_and_sum(self):
        f = Chebfun.from_function(np.sin, domain=(0, math.pi))
        self.assertAlmostEqual(f.sum(), 2.0, delta=1e-13)
        df = diff(f)
        space = np.linspace(0, math.pi, 11)
        self.assertListAlmostEqual(df(space), np.cos(space), delta=1e-12)
        self.assertListAlmostEqual(f.diff(2)(space), -np.sin(space), delta=1e-10)

    def test_norm(self):
        f = Chebfun.from_function(lambda x: x, domain=(-1, 1))
        self.assertAlmostEqual(f.norm(), math.sqrt(2.0/3.0), delta=1e-14)
        self.assertAlmostEqual(f.norm(np.inf), 1.0, delta=1e-14)

    def test_arithmetic(self):
        x = Chebfun.identity((0, 2))
        f = 2.0 * x**2 - x + 1
        self.assertAlmostEqual(f(1.5), 2.0*2.25 - 1.5 + 1, delta=1e-14)
        g = np.float64(3.0) * x
        self.assertIsInstance(g, Chebfun)
        self.assertAlmostEqual(g(0.5), 1.5, delta=1e-14)
        h = np.exp(x)
        self.assertIsInstance(h, Chebfun)
        self.assertAlmostEqual(h(1.0), math.e, delta=1e-13)
        q = (x + 1) / (x + 2)
        self.assertAlmostEqual(q(1.0), 2.0/3.0, delta=1e-13)
        with self.assertRaises(ValueError):
            x + Chebfun.identity((0, 1))

    def test_chebmatrix(self):
        x = Chebfun.identity()
        u = Chebmatrix([x, 2*x])
        v = u + 1
        self.assertEqual(len(v), 2)
        self.assertAlmostEqual(v[1](0.5), 2.0, delta=1e-14)
        self.assertAlmostEqual((u - u).norm(), 0.0, delta=1e-15)
        self.assertAlmostEqual(u.norm(), math.sqrt(5.0 * 2.0/3.0), delta=1e-14)


def run_tests():
    suite = unittest.TestLoader().loadTestsFromModule(sys.modules[__name__])
    return len(unittest.TextTestRunner(verbosity=2).run(suite).failures)


if __name__ == '__main__':
    unittest.main()
