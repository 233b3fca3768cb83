#!/usr/bin/env python3

import unittest
import sys

import numpy as np

from testutils import DpkTestCase
from ..funcs.chebfun2 import Chebfun2
from .coeffs import EmptyCoeff, ScalarCoeff, FieldCoeff, coeff_matrix
from .lowrank import decompose_operator, require_rank, DegenerateOperatorError


class TestDenseDecomposition(DpkTestCase):
    def test_laplace(self):
        A = np.array([[0., 0., 1.], [0., 0., 0.], [1., 0., 0.]])
        fact = decompose_operator(A, np.finfo(float).eps)
        self.assertEqual(fact.rank, 2)
        self.assertTrue(fact.dense)
        recon = fact.U.dot(np.diag(fact.S)).dot(fact.V.T)
        self.assertLessEqual(np.abs(recon - A.T).max(), 1e-14)
        self.assertEqual(fact.U.shape, (3, 2))
        self.assertEqual(fact.V.shape, (3, 2))

    def test_full_rank(self):
        fact = decompose_operator(np.eye(3), 1e-14)
        self.assertEqual(fact.rank, 3)

    def test_rank_zero(self):
        fact = decompose_operator(np.zeros((2, 2)), 1e-14)
        self.assertEqual(fact.rank, 0)
        with self.assertRaises(DegenerateOperatorError):
            require_rank(fact)

    def test_parity(self):
        laplace = decompose_operator([[0., 0., 1.], [0., 0., 0.], [1., 0., 0.]], 1e-14)
        self.assertEqual(laplace.parity_splits(1e-14), (True, True))
        heat = decompose_operator([[0., 1.], [0., 0.], [-1., 0.]], 1e-14)
        self.assertEqual(heat.parity_splits(1e-14), (True, False))
        advection = decompose_operator([[1., 0.], [1., 0.]], 1e-14)
        self.assertEqual(advection.parity_splits(1e-14), (False, True))

    def test_terms(self):
        fact = decompose_operator([[0., 1.], [0., 0.], [-1., 0.]], 1e-14)
        for r in range(fact.rank):
            ys = fact.y_terms(r)
            xs = fact.x_terms(r)
            self.assertEqual(len(ys), 2)
            self.assertEqual(len(xs), 3)
            for c in ys + xs:
                self.assertIsType(c, ScalarCoeff)


class TestCellDecomposition(DpkTestCase):
    def setUp(self):
        self.domain = (-1, 1, -1, 1)
        self.field = Chebfun2.from_function(lambda x, y: 1 + x**2 * y**2, self.domain)

    def test_variable_coefficient(self):
        A = coeff_matrix([[self.field, None, 1.0], [None, None, None], [1.0, None, None]])
        fact = decompose_operator(A, np.finfo(float).eps)
        self.assertFalse(fact.dense)
        self.assertEqual(fact.rank, 4)
        self.assertListAlmostEqual(fact.S, [1.0] * 4, delta=0)
        kinds = [tuple(type(c) for c in fact.x_terms(r)) for r in range(fact.rank)]
        self.assertIn((FieldCoeff, EmptyCoeff, EmptyCoeff), kinds)
        self.assertIn((EmptyCoeff, EmptyCoeff, ScalarCoeff), kinds)

    def test_field_terms_reconstruct(self):
        A = coeff_matrix([[self.field]])
        fact = decompose_operator(A, np.finfo(float).eps)
        self.assertEqual(fact.rank, 2)
        x, y = 0.3, -0.7
        value = sum(fact.U[0, r].field(y) * fact.V[0, r].field(x)
                    for r in range(fact.rank))
        self.assertAlmostEqual(value, 1 + x**2 * y**2, delta=1e-13)

    def test_filtered_terms(self):
        tiny = Chebfun2(np.array([[1e-20]]), self.domain)
        A = coeff_matrix([[tiny, 0.0], [None, 1e-20]])
        fact = decompose_operator(A, np.finfo(float).eps)
        self.assertEqual(fact.rank, 0)
        self.assertEqual(fact.parity_splits(1e-14), (False, False))


def run_tests():
    suite = unittest.TestLoader().loadTestsFromModule(sys.modules[__name__])
    return len(unittest.TextTestRunner(verbosity=2).run(suite).failures)


if __name__ == '__main__':
    unittest.main()
