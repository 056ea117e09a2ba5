# --- Purpose: Handles the in-memory representation of a dense matrix. ---

import operator
from typing import Any, Callable, Optional, Tuple

import numpy as np

from . import textio
from .errors import MatrixCalcError, MatrixDimensionError, MatrixRangeError
from .plan import Plan, CloneNode


def _blank(shape, dtype):
    rows, cols = shape
    if rows < 0 or cols < 0:
        raise MatrixRangeError(f"Matrix dimensions must not be negative, got {shape}.")
    if dtype == np.dtype(object):
        # Generic elements start out as None
        return np.empty((rows, cols), dtype=object)
    return np.zeros((rows, cols), dtype=dtype)


def _to_buffer(data, dtype):
    """
    Copies a 1-D or 2-D sequence into a new 2-D buffer.

    Only lists (or arrays) of lists are read as rows. Any other item, a
    tuple included, is a single element, so `Matrix([(1, "a"), (2, "b")])`
    is one row of two pairs.
    """
    if isinstance(data, np.ndarray):
        array = _cast(data, dtype)
        if array.ndim == 1:
            array = array.reshape(1, -1)
        if array.ndim != 2:
            raise MatrixDimensionError(f"Expected a 1-D or 2-D array, got {array.ndim} dimensions.")
        return array

    rows = list(data)
    if not rows or not all(isinstance(row, (list, np.ndarray)) for row in rows):
        rows = [rows]

    width = len(rows[0])
    if any(len(row) != width for row in rows):
        raise MatrixCalcError("All rows of a matrix must have the same length.")

    # Fill cell by cell so tuple elements are not unpacked into a third axis
    buffer = np.empty((len(rows), width), dtype=object)
    for i, row in enumerate(rows):
        for j, value in enumerate(row):
            buffer[i, j] = value

    if dtype == np.dtype(object):
        return buffer
    return _cast(buffer, dtype)


def _cast(array, dtype):
    try:
        return np.array(array, dtype=dtype)
    except (TypeError, ValueError) as e:
        raise MatrixCalcError(f"Elements cannot be stored as {dtype.name}: {e}") from e


class Matrix(Plan):
    """
    A dense 2-D matrix held in memory.

    A Matrix is also the starting point of a lazy plan: every query method
    inherited from Plan (map, transpose, zip, ...) reads this matrix only
    when the resulting plan is materialized with `to_matrix()`.

    Example:
        >>> m = Matrix([[1, 2], [3, 4]])
        >>> m.transpose().to_matrix().to_list()
        [[1, 3], [2, 4]]
    """
    # Element traits, overridden by the typed facades in operators.py
    numeric = False
    element_dtype = None  # None: any Python object
    element_type = str  # type parsed by from_string

    def __init__(self, data=None, shape: Optional[Tuple[int, int]] = None, dtype=None):
        """
        Initialize a Matrix.

        Args:
            data: Initial data (nested lists, a flat list for a single row, or an ndarray)
            shape: (rows, columns) of a default-initialized matrix, used when data is None
            dtype: Element dtype; defaults to the class trait, else object
        """
        if dtype is None:
            dtype = self.element_dtype if self.element_dtype is not None else object
        dtype = np.dtype(dtype)

        if data is not None:
            self._data = _to_buffer(data, dtype)
        elif shape is not None:
            self._data = _blank(shape, dtype)
        else:
            raise ValueError("Must provide either data or shape")

    @classmethod
    def _from_buffer(cls, array: np.ndarray) -> 'Matrix':
        """Internal constructor wrapping an existing 2-D buffer without copying it."""
        obj = cls.__new__(cls)
        obj._data = array
        return obj

    @classmethod
    def cast_from(cls, matrix: 'Matrix') -> 'Matrix':
        """Re-types a matrix as `cls`, converting elements to its dtype when it has one."""
        if cls.element_dtype is None:
            return cls._from_buffer(matrix._data)
        return cls._from_buffer(matrix._data.astype(cls.element_dtype))

    @classmethod
    def from_string(cls, text: str, rule: Optional['textio.ParseFromString'] = None,
                    element_type: Optional[type] = None) -> 'Matrix':
        return textio.matrix_from_string(text, cls, rule=rule, element_type=element_type)

    @property
    def node(self):
        # A fresh leaf per query keeps nodes pointing away from the matrix only
        return CloneNode(self)

    @property
    def rows(self) -> int:
        return self._data.shape[0]

    @property
    def columns(self) -> int:
        return self._data.shape[1]

    @property
    def length(self) -> int:
        return self.rows * self.columns

    @property
    def shape(self) -> Tuple[int, int]:
        return self._data.shape

    @property
    def dtype(self) -> np.dtype:
        return self._data.dtype

    def is_numeric(self) -> bool:
        return self.numeric

    def _check_index(self, key):
        try:
            i, j = key
            i, j = operator.index(i), operator.index(j)
        except (TypeError, ValueError):
            raise MatrixRangeError("A matrix index must be a (row, column) pair of integers.") from None

        if not (0 <= i < self.rows and 0 <= j < self.columns):
            raise MatrixRangeError(f"Index ({i}, {j}) is out of range for shape {self.shape}.")
        return i, j

    def __getitem__(self, key) -> Any:
        return self._data[self._check_index(key)]

    def __setitem__(self, key, value):
        self._data[self._check_index(key)] = value

    def get(self, row: int, col: int) -> Any:
        return self[row, col]

    def iterate_with_position(self, visitor: Callable[[Any, int, int], None]):
        """Calls `visitor(value, row, col)` for every cell in row-major order."""
        for i in range(self.rows):
            for j in range(self.columns):
                visitor(self._data[i, j], i, j)

    def iterate(self, visitor: Callable[[Any], None]):
        self.iterate_with_position(lambda value, _i, _j: visitor(value))

    def to_flat_array(self) -> np.ndarray:
        """Returns the elements of a single-row or single-column matrix as a 1-D array."""
        if self.rows != 1 and self.columns != 1:
            raise MatrixDimensionError("The matrix's dimension is not one.")
        return self._data.reshape(-1).copy()

    def to_list(self) -> list:
        return self._data.tolist()

    def to_numpy(self) -> np.ndarray:
        return self._data.copy()

    def clone(self) -> 'Matrix':
        """Deep copy with its own buffer; mutating the copy never affects this matrix."""
        return type(self)._from_buffer(self._data.copy())

    def to_string(self, rule: Optional['textio.ParseToString'] = None) -> str:
        return textio.matrix_to_string(self, rule)

    def __str__(self):
        return textio.matrix_to_string(self)

    def __repr__(self):
        return f"{type(self).__name__}(shape={self.shape}, dtype={self.dtype.name})"

    def __or__(self, other: 'Matrix') -> 'Matrix':
        return concat_vertical(self, other)

    def __and__(self, other: 'Matrix') -> 'Matrix':
        return concat_horizontal(self, other)


def concat_vertical(top: Matrix, bottom: Matrix) -> Matrix:
    """Stacks `bottom` under `top`. The result has the class and dtype of `top`."""
    if top.columns != bottom.columns:
        raise MatrixCalcError(
            "Failed to concat the two matrices due to the mismatch of the columns numbers."
        )
    stacked = np.concatenate([top._data, bottom._data], axis=0)
    return type(top)._from_buffer(stacked.astype(top.dtype, copy=False))


def concat_horizontal(left: Matrix, right: Matrix) -> Matrix:
    """Places `right` beside `left`. The result has the class and dtype of `left`."""
    if left.rows != right.rows:
        raise MatrixCalcError(
            "Failed to concat the two matrices due to the mismatch of the rows numbers."
        )
    joined = np.concatenate([left._data, right._data], axis=1)
    return type(left)._from_buffer(joined.astype(left.dtype, copy=False))
