"""Tests for the dense linear algebra primitives."""

import unittest

import numpy as np

from rcthermal import NumericalError, multiply, symmetric_eigen


class TestSymmetricEigen(unittest.TestCase):
    """Tests for symmetric_eigen()."""

    def test_reconstructs_matrix(self):
        """U diag(L) U^T should reproduce the input matrix."""
        rng = np.random.default_rng(3)
        X = rng.standard_normal((6, 6))
        A = X + X.T

        L, U = symmetric_eigen(A)

        np.testing.assert_allclose(U @ np.diag(L) @ U.T, A, atol=1e-12)
        np.testing.assert_allclose(U.T @ U, np.eye(6), atol=1e-12)

    def test_eigenvalues_ascending(self):
        """Eigenvalues should be returned in ascending order."""
        L, _ = symmetric_eigen(np.diag([3.0, -1.0, 2.0]))
        np.testing.assert_allclose(L, [-1.0, 2.0, 3.0])

    def test_non_finite_input_raises(self):
        """NaN input should raise NumericalError, not return garbage."""
        A = np.array([[1.0, np.nan], [np.nan, 1.0]])
        with self.assertRaises(NumericalError):
            symmetric_eigen(A)


class TestMultiply(unittest.TestCase):
    """Tests for multiply()."""

    def setUp(self):
        self.a = np.array([[1.0, 2.0], [3.0, 4.0], [5.0, 6.0]])
        self.b = np.array([[1.0, 0.0, 2.0], [0.0, 1.0, 1.0]])

    def test_beta_zero_overwrites(self):
        """beta=0 should ignore existing contents of c."""
        c = np.full((3, 3), np.nan)
        multiply(1.0, self.a, self.b, 0.0, c)
        np.testing.assert_allclose(c, self.a @ self.b)

    def test_accumulates(self):
        """beta=1 should add the scaled product to c."""
        c = np.ones((3, 3))
        out = multiply(2.0, self.a, self.b, 1.0, c)
        self.assertIs(out, c)
        np.testing.assert_allclose(c, 1.0 + 2.0 * (self.a @ self.b))

    def test_scales_existing(self):
        """beta other than 0 or 1 should scale c before accumulating."""
        c = np.full((3, 3), 2.0)
        multiply(1.0, self.a, self.b, 0.5, c)
        np.testing.assert_allclose(c, 1.0 + self.a @ self.b)

    def test_vector_operand(self):
        """Matrix-vector products should update a 1-D accumulator."""
        x = np.array([1.0, -1.0])
        y = np.array([10.0, 10.0, 10.0])
        multiply(1.0, self.a, x, 1.0, y)
        np.testing.assert_allclose(y, [9.0, 9.0, 9.0])

    def test_writes_through_view(self):
        """A transposed slice of a larger array should be updated in place."""
        storage = np.zeros((4, 3))
        multiply(1.0, self.a, self.b, 1.0, storage[1:].T)
        np.testing.assert_allclose(storage[0], 0.0)
        np.testing.assert_allclose(storage[1:].T, self.a @ self.b)


if __name__ == '__main__':
    unittest.main()
