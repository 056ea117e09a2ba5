"""
mathq - generic 2-D matrices with lazily evaluated, adaptively parallel queries.
"""

from .backend import ExecutionMode
from .core import Matrix, concat_horizontal, concat_vertical
from .errors import (
    MatrixCalcError,
    MatrixDimensionError,
    MatrixError,
    MatrixParseError,
    MatrixRangeError,
)
from .observability import configure_logging, get_profiler
from .operators import DoubleMatrix, FloatMatrix, IntMatrix, NumericMatrix
from .plan import Plan
from .textio import ParseFromString, ParseToString, matrix_from_string, matrix_to_string

__version__ = "0.1.0"

__all__ = [
    "ExecutionMode",
    "Matrix",
    "Plan",
    "NumericMatrix",
    "IntMatrix",
    "FloatMatrix",
    "DoubleMatrix",
    "concat_vertical",
    "concat_horizontal",
    "matrix_to_string",
    "matrix_from_string",
    "ParseToString",
    "ParseFromString",
    "MatrixError",
    "MatrixCalcError",
    "MatrixDimensionError",
    "MatrixRangeError",
    "MatrixParseError",
    "configure_logging",
    "get_profiler",
]
