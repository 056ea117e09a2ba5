"""
Unit tests for the typed numeric matrices.
Tests arithmetic operators, shape checks and concatenation operators.
"""

import unittest
import os
import sys
import numpy as np
from unittest import mock

# Add the parent directory to the path so we can import the mathq module
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from mathq import IntMatrix, FloatMatrix, DoubleMatrix, Matrix, backend
from mathq.errors import MatrixCalcError


class TestNumericOperators(unittest.TestCase):
    """Test cases for +, -, * and @ on numeric matrices."""

    def setUp(self):
        self.m = IntMatrix([[1, 2], [3, 4]])

    def test_transpose_of_int_matrix(self):
        self.assertEqual(self.m.transpose().to_matrix().to_list(), [[1, 3], [2, 4]])

    def test_addition(self):
        result = self.m + self.m
        self.assertIsInstance(result, IntMatrix)
        self.assertEqual(result.to_matrix().to_list(), [[2, 4], [6, 8]])

    def test_subtraction(self):
        other = IntMatrix([[1, 1], [1, 1]])
        self.assertEqual((self.m - other).to_list(), [[0, 1], [2, 3]])

    def test_matrix_product(self):
        result = self.m * self.m
        self.assertIsInstance(result, IntMatrix)
        self.assertEqual(result.to_matrix().to_list(), [[7, 10], [15, 22]])
        self.assertEqual((self.m @ self.m).to_list(), [[7, 10], [15, 22]])

    def test_rectangular_product_matches_numpy(self):
        a = np.arange(6).reshape(2, 3)
        b = np.arange(12).reshape(3, 4) - 5
        result = IntMatrix(a) * IntMatrix(b)
        self.assertEqual(result.shape, (2, 4))
        np.testing.assert_array_equal(result.to_numpy(), a @ b)

    def test_expensive_product_runs_in_parallel(self):
        """A 30x30 output with an inner length of 30 crosses the automatic threshold."""
        rng = np.random.default_rng(7)
        a = rng.integers(-10, 10, size=(30, 30))
        b = rng.integers(-10, 10, size=(30, 30))

        with mock.patch.object(backend, 'fill_parallel', wraps=backend.fill_parallel) as parallel:
            result = IntMatrix(a) * IntMatrix(b)

        parallel.assert_called_once()
        np.testing.assert_array_equal(result.to_numpy(), a @ b)

    def test_scalar_product(self):
        self.assertEqual((3 * self.m).to_list(), [[3, 6], [9, 12]])
        self.assertEqual((self.m * 2).to_list(), [[2, 4], [6, 8]])

    def test_double_and_float_matrices(self):
        d = DoubleMatrix([[0.5, 1.5]])
        f = FloatMatrix([[0.5, 1.5]])

        self.assertEqual((d + d).to_list(), [[1.0, 3.0]])
        self.assertEqual((d + d).dtype, np.float64)
        self.assertEqual((f * f.transpose().to_matrix(FloatMatrix)).to_list(), [[2.5]])
        self.assertEqual((f - f).dtype, np.float32)

    def test_shape_mismatch_fails(self):
        other = IntMatrix([[1, 2, 3], [4, 5, 6], [7, 8, 9]])
        with self.assertRaises(MatrixCalcError):
            self.m + other
        with self.assertRaises(MatrixCalcError):
            self.m - other
        with self.assertRaises(MatrixCalcError):
            self.m * IntMatrix([[1, 2, 3]])

    def test_mixed_matrix_types_are_rejected(self):
        floats = FloatMatrix([[0.5, 0.5], [0.5, 0.5]])
        with self.assertRaises(MatrixCalcError):
            self.m + floats
        with self.assertRaises(MatrixCalcError):
            self.m - DoubleMatrix([[1.0, 1.0], [1.0, 1.0]])
        with self.assertRaises(MatrixCalcError):
            self.m * floats
        with self.assertRaises(MatrixCalcError):
            self.m @ Matrix([[1, 2], [3, 4]])

    def test_lossy_scalar_is_rejected(self):
        row = IntMatrix([[1, 3]])
        with self.assertRaises(MatrixCalcError):
            row * 0.5
        with self.assertRaises(MatrixCalcError):
            0.5 * row
        with self.assertRaises(MatrixCalcError):
            FloatMatrix([[1.0]]) * 1e300

    def test_scalar_that_fits_is_accepted(self):
        self.assertEqual((-2 * self.m).to_list(), [[-2, -4], [-6, -8]])
        self.assertEqual((DoubleMatrix([[1.0, 3.0]]) * 0.5).to_list(), [[0.5, 1.5]])
        self.assertEqual((FloatMatrix([[2.0]]) * 3).to_list(), [[6.0]])

    def test_unsupported_operand(self):
        with self.assertRaises(TypeError):
            self.m + 1
        with self.assertRaises(TypeError):
            self.m * "x"

    def test_concat_operators_keep_type(self):
        vertical = self.m | IntMatrix([5, 6])
        horizontal = self.m & IntMatrix([[5], [6]])

        self.assertIsInstance(vertical, IntMatrix)
        self.assertIsInstance(horizontal, IntMatrix)
        self.assertEqual(vertical.to_list(), [[1, 2], [3, 4], [5, 6]])
        self.assertEqual(horizontal.to_list(), [[1, 2, 5], [3, 4, 6]])

    def test_cast_from_generic_result(self):
        plan = self.m.map(lambda x: x * 2)
        generic = plan.to_matrix()
        typed = plan.to_matrix(IntMatrix)

        self.assertIs(type(generic), Matrix)
        self.assertIsInstance(typed, IntMatrix)
        self.assertEqual(typed.dtype, np.int64)
        self.assertEqual((typed + self.m).to_list(), [[3, 6], [9, 12]])


if __name__ == '__main__':
    unittest.main()
