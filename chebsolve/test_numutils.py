#!/usr/bin/env python3

import unittest
import sys

import numpy as np

from testutils import DpkTestCase
from .numutils import raise_all_warnings
from .prefs import BVPPrefs, Cheb2Prefs
from .utils import count_positional_args


class TestNumutils(DpkTestCase):
    def test_raise_all_warnings(self):
        with raise_all_warnings():
            with self.assertRaises(FloatingPointError):
                np.pi / np.linspace(0, 1, 10)
        with np.errstate(divide='ignore'):
            self.assertTrue(np.isinf(np.pi / np.linspace(0, 1, 10)[0]))

    def test_count_positional_args(self):
        self.assertEqual(count_positional_args(lambda x, u: u), 2)
        self.assertEqual(count_positional_args(lambda u, k=2: u), 2)
        self.assertIsNone(count_positional_args(lambda *args: args))


class TestPrefs(DpkTestCase):
    def test_defaults(self):
        prefs = BVPPrefs()
        self.assertEqual(prefs.discretization, 'collocation')
        self.assertEqual(prefs.max_iter, 25)
        self.assertTrue(prefs.damped)
        self.assertEqual(Cheb2Prefs().corner_tol_factor, 100.0)

    def test_aliases(self):
        self.assertEqual(BVPPrefs(discretization='ultraS').discretization,
                         'ultraspherical')
        self.assertEqual(BVPPrefs(discretization='colloc2').discretization,
                         'collocation')
        with self.assertRaises(ValueError):
            BVPPrefs(discretization='spline')

    def test_copy(self):
        prefs = BVPPrefs(max_iter=3)
        other = prefs.copy(discretization='ultraS', damped=False)
        self.assertEqual(other.max_iter, 3)
        self.assertFalse(other.damped)
        self.assertEqual(other.discretization, 'ultraspherical')
        self.assertTrue(prefs.damped)
        self.assertEqual(prefs.discretization, 'collocation')

    def test_slots(self):
        with self.assertRaises(AttributeError):
            BVPPrefs(error_tol=1e-5)


class _PlainResult(object):
    r"""Result object without the bookkeeping lists of unittest.TestResult."""
    def __init__(self):
        self.outcomes = []
    def startTest(self, test): pass
    def stopTest(self, test): pass
    def addDuration(self, test, elapsed): pass
    def addSuccess(self, test): self.outcomes.append('success')
    def addError(self, test, err): self.outcomes.append('error')
    def addFailure(self, test, err): self.outcomes.append('failure')


class TestDpkTestCase(DpkTestCase):
    def test_foreign_result_object(self):
        class _Case(DpkTestCase):
            def test_pass(self):
                self.assertFunctionAlmostEqual(np.sin, np.sin)
            def test_fail(self):
                self.assertFunctionAlmostEqual(np.sin, np.cos, delta=0.1)
        result = _PlainResult()
        _Case('test_pass').run(result)
        _Case('test_fail').run(result)
        self.assertEqual(result.outcomes, ['success', 'failure'])


def run_tests():
    suite = unittest.TestLoader().loadTestsFromModule(sys.modules[__name__])
    return len(unittest.TextTestRunner(verbosity=2).run(suite).failures)


if __name__ == '__main__':
    unittest.main()
