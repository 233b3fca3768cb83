#!/usr/bin/env python3

import unittest
import sys

import numpy as np

from testutils import DpkTestCase
from .chebfun2 import Chebfun2, chebpts2, UnrecognizedTechnologyError


class TestChebfun2(DpkTestCase):
    def setUp(self):
        self.func = lambda x, y: np.exp(x) * np.sin(2*y) + x*y
        self.domain = (-1, 2, 0, 1)
        self.f = Chebfun2.from_function(self.func, self.domain)
        self.tol = 1e3 * np.finfo(float).eps * self.f.vscale()

    def test_evaluate(self):
        xx, yy = np.meshgrid(np.linspace(-1, 2, 7), np.linspace(0, 1, 5))
        err = np.abs(self.f(xx, yy) - self.func(xx, yy)).max()
        self.assertLessEqual(err, self.tol)

    def test_diff(self):
        fx = self.f.diff(1, 'x')
        fyy = self.f.diff(2, 'y')
        self.assertAlmostEqual(fx(0.5, 0.3), np.exp(0.5)*np.sin(0.6) + 0.3, delta=1e-11)
        self.assertAlmostEqual(fyy(0.5, 0.3), -4*np.exp(0.5)*np.sin(0.6), delta=1e-9)

    def test_cdr(self):
        cols, d, rows = self.f.cdr()
        self.assertEqual(len(d), 2)
        x, y = 0.7, 0.4
        val = sum(c(y) * s * r(x) for c, s, r in zip(cols, d, rows))
        self.assertAlmostEqual(val, self.func(x, y), delta=self.tol)

    def test_vscale(self):
        g = Chebfun2(np.array([[0.0, 2.0]]))
        self.assertAlmostEqual(g.vscale(), 2.0, delta=1e-15)

    def test_restrictions(self):
        col = self.f.column(0.5)
        row = self.f.row(0.25)
        self.assertAlmostEqual(col(0.8), self.func(0.5, 0.8), delta=self.tol)
        self.assertAlmostEqual(row(-0.5), self.func(-0.5, 0.25), delta=self.tol)

    def test_chebpts2(self):
        xx, yy = chebpts2(3, 4, (0, 2, -1, 1))
        self.assertEqual(xx.shape, (4, 3))
        self.assertListAlmostEqual(xx[0], [0.0, 1.0, 2.0], delta=1e-15)
        self.assertListAlmostEqual(yy[:, 0], [-1.0, -0.5, 0.5, 1.0], delta=1e-15)
        xx, yy = chebpts2(5, 5, tech='fourtech')
        self.assertListAlmostEqual(xx[0], [-1.0, -0.5, 0.0, 0.5, 1.0], delta=1e-15)
        xx, yy = chebpts2(4, tech='chebtech1')
        self.assertTrue(np.all(np.abs(xx) < 1))
        with self.assertRaises(UnrecognizedTechnologyError):
            chebpts2(4, 4, tech='trigtech')


def run_tests():
    suite = unittest.TestLoader().loadTestsFromModule(sys.modules[__name__])
    return len(unittest.TextTestRunner(verbosity=2).run(suite).failures)


if __name__ == '__main__':
    unittest.main()
