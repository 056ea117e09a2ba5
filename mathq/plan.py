# --- Purpose: Deferred operation nodes and the lazy Plan handle built from them. ---

import logging
from typing import Any, Callable, Optional, Tuple

import numpy as np

from . import backend
from .backend import ExecutionMode
from .errors import MatrixCalcError, MatrixRangeError
from .observability import get_profiler

logger = logging.getLogger(__name__)


class CloneNode:
    """The leaf of every plan. Executing it deep-copies the current state of a matrix."""
    mode = ExecutionMode.SERIES

    def __init__(self, matrix):
        self.matrix = matrix

    @property
    def shape(self):
        return self.matrix.shape

    def __repr__(self):
        return f"CloneNode(shape={self.matrix.shape})"

    def execute(self):
        logger.debug(f" - Executing CloneNode: copying matrix of shape {self.matrix.shape}")
        return self.matrix.clone()


class ParallelNode:
    """Annotates every downstream node with a parallel or automatic execution mode."""
    def __init__(self, source, force: bool):
        self.source = source
        self.mode = ExecutionMode.PARALLEL if force else ExecutionMode.AUTO

    @property
    def shape(self):
        return self.source.shape

    def __repr__(self):
        return f"ParallelNode(source={self.source!r}, mode={self.mode.value})"

    def execute(self):
        return self.source.execute()


class MapNode:
    """Evaluates `mapper(value, row, col)` once per cell of its source."""
    def __init__(self, source, mapper: Callable[[Any, int, int], Any],
                 dtype=None, cost: int = 1):
        self.source = source
        self.mapper = mapper
        self.dtype = np.dtype(dtype) if dtype is not None else np.dtype(object)
        self.cost = cost

    @property
    def mode(self):
        return self.source.mode

    @property
    def shape(self):
        return self.source.shape

    def __repr__(self):
        return f"MapNode(source={self.source!r}, dtype={self.dtype.name}, cost={self.cost})"

    def execute(self):
        from .core import Matrix

        matrix = self.source.execute()
        data = matrix._data
        mapper = self.mapper

        result = np.empty(matrix.shape, dtype=self.dtype)
        logger.debug(f" - Executing MapNode: {matrix.shape} in {self.mode.value} mode")
        backend.fill(result, lambda i, j: mapper(data[i, j], i, j), self.mode, self.cost)
        return Matrix._from_buffer(result)


class TransposeNode:
    """Swaps rows and columns: result[i, j] = source[j, i]."""
    def __init__(self, source):
        self.source = source

    @property
    def mode(self):
        return self.source.mode

    @property
    def shape(self):
        rows, cols = self.source.shape
        return (cols, rows)

    def __repr__(self):
        return f"TransposeNode(source={self.source!r})"

    def execute(self):
        from .core import Matrix

        matrix = self.source.execute()
        data = matrix._data

        result = np.empty((matrix.columns, matrix.rows), dtype=data.dtype)
        logger.debug(f" - Executing TransposeNode: {matrix.shape} in {self.mode.value} mode")
        backend.fill(result, lambda i, j: data[j, i], self.mode)
        return Matrix._from_buffer(result)


class ZipNode:
    """Pairs up the cells of two equally shaped sources as (left, right) tuples."""
    def __init__(self, left, right):
        self.left = left
        self.right = right

    @property
    def mode(self):
        return self.left.mode

    @property
    def shape(self):
        return self.left.shape

    def __repr__(self):
        # !r calls the repr() of the inner objects, creating a nested view
        return f"ZipNode(left={self.left!r}, right={self.right!r})"

    def execute(self):
        from .core import Matrix

        matrix_l = self.left.execute()
        matrix_r = self.right.execute()
        if matrix_l.shape != matrix_r.shape:
            raise MatrixCalcError(
                f"Cannot zip matrices of shapes {matrix_l.shape} and {matrix_r.shape}."
            )

        data_l, data_r = matrix_l._data, matrix_r._data
        result = np.empty(matrix_l.shape, dtype=object)
        logger.debug(f" - Executing ZipNode: {matrix_l.shape} in {self.mode.value} mode")
        backend.fill(result, lambda i, j: (data_l[i, j], data_r[i, j]), self.mode)
        return Matrix._from_buffer(result)


class CropNode:
    """
    Copies the inclusive rectangle start..end out of its source.
    An end coordinate of -1 stands for the last index along that axis.
    """
    def __init__(self, source, start: Tuple[int, int], end: Tuple[int, int]):
        self.source = source
        self.start = tuple(start)
        self.end = tuple(end)

    @property
    def mode(self):
        return self.source.mode

    def _resolve(self, shape):
        rows, cols = shape
        r_start, c_start = self.start
        r_end = rows - 1 if self.end[0] == -1 else self.end[0]
        c_end = cols - 1 if self.end[1] == -1 else self.end[1]

        if r_end >= rows or c_end >= cols or r_start > r_end or c_start > c_end:
            raise MatrixRangeError(
                f"Crop range {self.start}..{self.end} does not fit a matrix of shape {shape}."
            )
        return r_start, c_start, r_end, c_end

    @property
    def shape(self):
        r_start, c_start, r_end, c_end = self._resolve(self.source.shape)
        return (r_end - r_start + 1, c_end - c_start + 1)

    def __repr__(self):
        return f"CropNode(source={self.source!r}, start={self.start}, end={self.end})"

    def execute(self):
        from .core import Matrix

        matrix = self.source.execute()
        data = matrix._data
        r_start, c_start, r_end, c_end = self._resolve(matrix.shape)

        result = np.empty((r_end - r_start + 1, c_end - c_start + 1), dtype=data.dtype)
        logger.debug(f" - Executing CropNode: {result.shape} out of {matrix.shape}")
        backend.fill(result, lambda i, j: data[i + r_start, j + c_start], self.mode)
        return Matrix._from_buffer(result)


class Plan:
    """
    Represents a computation that will result in a matrix, but is not yet executed.

    Every query returns a new Plan wrapping a new node that points back at
    this plan's node, so a Plan is never changed once built and can be
    materialized any number of times. Each `to_matrix()` call re-reads the
    matrices at the leaves of the chain.
    """
    def __init__(self, node):
        # The 'node' is the terminal step of this plan
        self.node = node

    @property
    def shape(self) -> Tuple[int, int]:
        """Shape of the matrix this plan materializes to, computed without executing it."""
        return self.node.shape

    @property
    def mode(self) -> ExecutionMode:
        return self.node.mode

    def __repr__(self):
        return f"Plan(plan={self.node!r})"

    def map(self, mapper: Callable[[Any], Any], dtype=None) -> 'Plan':
        return self.map_with_position(lambda value, _i, _j: mapper(value), dtype=dtype)

    def map_with_position(self, mapper: Callable[[Any, int, int], Any], dtype=None,
                          cost: int = 1) -> 'Plan':
        """
        Build a plan that applies `mapper(value, row, col)` to every cell.

        Args:
            mapper: Function of the cell value and its position
            dtype: Element dtype of the output (defaults to object)
            cost: Relative work per cell, biases automatic parallel selection
        """
        return Plan(MapNode(self.node, mapper, dtype=dtype, cost=cost))

    def set(self, setter: Callable[[int, int], Any], dtype=None, cost: int = 1) -> 'Plan':
        """
        Build a plan whose cells are `setter(row, col)`, ignoring the current values.

        To change one element of a concrete matrix use `matrix[row, col] = value`.
        """
        if not callable(setter):
            raise TypeError(
                "set() takes a setter function of (row, col); "
                "use matrix[row, col] = value to change a single element."
            )
        return self.map_with_position(lambda _value, i, j: setter(i, j), dtype=dtype, cost=cost)

    def transpose(self) -> 'Plan':
        return Plan(TransposeNode(self.node))

    def zip(self, other: 'Plan') -> 'Plan':
        return Plan(ZipNode(self.node, other.node))

    def sub_matrix(self, start: Tuple[int, int], end: Tuple[int, int]) -> 'Plan':
        """Build a plan cropping the inclusive rectangle from `start` to `end`."""
        if start[0] > end[0] or start[1] > end[1]:
            raise MatrixRangeError("Start position must not be after end position.")
        if min(*start, *end) < 0:
            raise MatrixRangeError("Crop positions must not be negative.")
        return Plan(CropNode(self.node, start, end))

    def row(self, pos: int) -> 'Plan':
        if pos < 0:
            raise MatrixRangeError("Row position must not be negative.")
        return Plan(CropNode(self.node, (pos, 0), (pos, -1)))

    def column(self, pos: int) -> 'Plan':
        if pos < 0:
            raise MatrixRangeError("Column position must not be negative.")
        return Plan(CropNode(self.node, (0, pos), (-1, pos)))

    def as_parallel(self, force: bool = False) -> 'Plan':
        """Run the following steps in parallel (`force`) or let cost decide (default)."""
        return Plan(ParallelNode(self.node, force))

    def to_matrix(self, cls=None):
        """
        Triggers the execution of the entire plan.

        Args:
            cls: Optional Matrix subclass to cast the result into

        Returns:
            A newly allocated concrete matrix
        """
        node = self.node
        with get_profiler().materialize(node) as record:
            logger.debug(f"Materializing {self!r}")
            result = node.execute()
            if record is not None:
                record.shape = result.shape

        if cls is not None:
            return cls.cast_from(result)
        return result
