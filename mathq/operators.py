"""
Operators module - typed numeric matrices with arithmetic operators.

One generic implementation, NumericMatrix, is parameterized by the element
traits each subclass declares (numpy dtype, parse type and zero value).
Element-wise operators run through the execution backend directly; matrix
multiplication is expressed as a lazy plan so its inner-product length can
steer the automatic series/parallel choice.
"""

import numbers
import operator

import numpy as np

from . import backend
from .core import Matrix
from .errors import MatrixCalcError


class NumericMatrix(Matrix):
    """
    Base class for numeric matrices.

    Example:
        >>> a = IntMatrix([[1, 2], [3, 4]])
        >>> (a * a).to_list()
        [[7, 10], [15, 22]]
    """
    numeric = True
    element_dtype = np.float64
    element_type = float
    zero = 0.0

    def _check_operand(self, other: Matrix):
        if type(other) is not type(self):
            raise MatrixCalcError(
                f"Invalid calculation: {type(self).__name__} cannot be combined "
                f"with {type(other).__name__}."
            )

    def _elementwise(self, other: Matrix, op) -> 'NumericMatrix':
        self._check_operand(other)
        if self.shape != other.shape:
            raise MatrixCalcError(
                f"Invalid calculation: shapes {self.shape} and {other.shape} differ."
            )
        left, right = self._data, other._data
        result = np.empty(self.shape, dtype=self.element_dtype)
        backend.fill(result, lambda i, j: op(left[i, j], right[i, j]))
        return type(self)._from_buffer(result)

    def _scale(self, scalar) -> 'NumericMatrix':
        # The scalar must fit the element dtype exactly, e.g. no 0.5 for an IntMatrix
        if not np.can_cast(np.min_scalar_type(scalar), self.element_dtype, 'safe'):
            raise MatrixCalcError(
                f"Invalid calculation: scalar {scalar!r} does not fit {type(self).__name__}."
            )
        data = self._data
        result = np.empty(self.shape, dtype=self.element_dtype)
        backend.fill(result, lambda i, j: scalar * data[i, j])
        return type(self)._from_buffer(result)

    def _matmul(self, other: Matrix) -> 'NumericMatrix':
        self._check_operand(other)
        if self.columns != other.rows:
            raise MatrixCalcError(
                f"Invalid calculation: inner dimensions {self.columns} and {other.rows} differ."
            )
        left, right = self._data, other._data
        inner = self.columns
        zero = self.zero

        def inner_product(i, j):
            total = zero
            for k in range(inner):
                total += left[i, k] * right[k, j]
            return total

        # Each output cell walks `inner` products, which is what the cost reflects
        return (type(self)(shape=(self.rows, other.columns))
                .as_parallel()
                .set(inner_product, dtype=self.element_dtype, cost=inner)
                .to_matrix(type(self)))

    def __add__(self, other):
        if not isinstance(other, Matrix):
            return NotImplemented
        return self._elementwise(other, operator.add)

    def __sub__(self, other):
        if not isinstance(other, Matrix):
            return NotImplemented
        return self._elementwise(other, operator.sub)

    def __mul__(self, other):
        if isinstance(other, Matrix):
            return self._matmul(other)
        if isinstance(other, numbers.Number):
            return self._scale(other)
        return NotImplemented

    def __rmul__(self, other):
        # Handles the case `2 * my_matrix`
        if isinstance(other, numbers.Number):
            return self._scale(other)
        return NotImplemented

    def __matmul__(self, other):
        if not isinstance(other, Matrix):
            return NotImplemented
        return self._matmul(other)


class IntMatrix(NumericMatrix):
    element_dtype = np.int64
    element_type = int
    zero = 0


class FloatMatrix(NumericMatrix):
    element_dtype = np.float32
    element_type = float
    zero = 0.0


class DoubleMatrix(NumericMatrix):
    element_dtype = np.float64
    element_type = float
    zero = 0.0
