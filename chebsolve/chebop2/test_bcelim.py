#!/usr/bin/env python3

import unittest
import sys
import warnings

import numpy as np

from testutils import DpkTestCase
from ..spectral.bcs import DirichletCondition
from .bcelim import canonical_bc, nonsingular_permute, zero_dof, check_corners
from .bcelim import recover_solution, LinearlyDependentBCsError
from .bcelim import BoundaryConditionWarning


class TestCanonicalBC(DpkTestCase):
    def setUp(self):
        rng = np.random.RandomState(42)
        self.B = rng.rand(2, 7)
        self.G = rng.rand(2, 5)

    def test_permutation(self):
        B = np.array([[0., 0., 1., 0.], [0., 0., 0., 1.]])
        self.assertListAlmostEqual(nonsingular_permute(B), [2, 3, 0, 1], delta=0)
        self.assertListAlmostEqual(nonsingular_permute(np.zeros((0, 3))),
                                   [0, 1, 2], delta=0)

    def test_canonical_form(self):
        Bc, Gc, perm = canonical_bc(self.B, self.G)
        self.assertListAlmostEqual(np.diag(Bc), [1.0, 1.0], delta=1e-14)
        self.assertEqual(Bc[1, 0], 0.0)
        # Same conditions, i.e. Bc = L B[:,perm] and Gc = L G for some L.
        L = Bc[:, :2].dot(np.linalg.inv(self.B[:, perm][:, :2]))
        self.assertLessEqual(np.abs(L.dot(self.B[:, perm]) - Bc).max(), 1e-13)
        self.assertLessEqual(np.abs(L.dot(self.G) - Gc).max(), 1e-13)

    def test_dependent(self):
        B = np.array([[1., 1., 1.], [2., 2., 2.]])
        with self.assertRaises(LinearlyDependentBCsError):
            canonical_bc(B, np.zeros((2, 3)), where="left/right (x)")

    def test_too_many(self):
        with self.assertRaises(LinearlyDependentBCsError):
            nonsingular_permute(np.ones((3, 2)))

    def test_empty(self):
        Bc, Gc, perm = canonical_bc(np.zeros((0, 4)), np.zeros((0, 3)))
        self.assertEqual(Bc.shape, (0, 4))
        self.assertEqual(Gc.shape, (0, 3))


class TestZeroDOF(DpkTestCase):
    def setUp(self):
        rng = np.random.RandomState(7)
        self.C1 = rng.rand(6, 6)
        self.C2 = rng.rand(4, 4)
        self.E = rng.rand(6, 4)
        B, G, perm = canonical_bc(rng.rand(2, 6), rng.rand(2, 4))
        self.B, self.G = B, G
        X = rng.rand(6, 4)
        X[:2, :] = np.linalg.solve(B[:, :2], G - B[:, 2:].dot(X[2:, :]))
        self.X = X

    def test_elimination(self):
        C1, E = zero_dof(self.C1, self.C2, self.E, self.B, self.G)
        self.assertFalse(np.any(C1[:, :2]))
        before = self.C1.dot(self.X).dot(self.C2.T) - self.E
        after = C1.dot(self.X).dot(self.C2.T) - E
        self.assertLessEqual(np.abs(before - after).max(), 1e-12)

    def test_idempotent(self):
        C1, E = zero_dof(self.C1, self.C2, self.E, self.B, self.G)
        C1b, Eb = zero_dof(C1, self.C2, E, self.B, self.G)
        self.assertListAlmostEqual(C1b.ravel(), C1.ravel(), delta=0)
        self.assertListAlmostEqual(Eb.ravel(), E.ravel(), delta=0)

    def test_no_conditions(self):
        C1, E = zero_dof(self.C1, self.C2, self.E, np.zeros((0, 6)), np.zeros((0, 4)))
        self.assertListAlmostEqual(C1.ravel(), self.C1.ravel(), delta=0)
        self.assertListAlmostEqual(E.ravel(), self.E.ravel(), delta=0)


class TestRecovery(DpkTestCase):
    def test_recover(self):
        rng = np.random.RandomState(3)
        m, n = 6, 5
        Bx, Gx, perm_x = canonical_bc(rng.rand(2, n), rng.rand(2, m))
        By, Gy, perm_y = canonical_bc(rng.rand(1, m), rng.rand(1, n))
        Gy = Gy[:, perm_x]
        Gx = Gx[:, perm_y]
        Xr = rng.rand(m - 1, n - 2)
        X = recover_solution(Xr, (m, n), Bx, Gx, By, Gy, perm_x, perm_y)
        Xp = X[np.ix_(perm_y, perm_x)]
        self.assertLessEqual(np.abs(By.dot(Xp) - Gy).max(), 1e-12)
        self.assertLessEqual(np.abs(Bx.dot(Xp[1:, :].T) - Gx[:, 1:]).max(), 1e-12)
        self.assertListAlmostEqual(Xp[1:, 2:].ravel(), Xr.ravel(), delta=0)


class TestCorners(DpkTestCase):
    def _data(self, left_value, up_value):
        n = 8
        dom = (-1, 1)
        empty = np.zeros((0, n))
        left = DirichletCondition(value=left_value)
        up = DirichletCondition(value=up_value)
        bcs = dict(left=left.functional(n, dom, x=-1)[np.newaxis],
                   up=up.functional(n, dom, x=1)[np.newaxis],
                   right=empty, down=empty)
        vals = dict(left=left.value_coeffs(n, dom)[np.newaxis],
                    up=up.value_coeffs(n, dom)[np.newaxis],
                    right=empty, down=empty)
        return bcs, vals

    def test_consistent(self):
        bcs, vals = self._data(lambda y: y, lambda x: -x)
        with warnings.catch_warnings():
            warnings.simplefilter('error', BoundaryConditionWarning)
            mismatch = check_corners(bcs, vals, np.finfo(float).eps)
        self.assertLessEqual(mismatch, 1e-13)

    def test_mismatch(self):
        bcs, vals = self._data(1.0, 0.0)
        with self.assertWarns(BoundaryConditionWarning):
            mismatch = check_corners(bcs, vals, np.finfo(float).eps)
        self.assertAlmostEqual(mismatch, 1.0, delta=1e-13)


def run_tests():
    suite = unittest.TestLoader().loadTestsFromModule(sys.modules[__name__])
    return len(unittest.TextTestRunner(verbosity=2).run(suite).failures)


if __name__ == '__main__':
    unittest.main()
