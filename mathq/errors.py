# --- Purpose: Failure types raised by matrix operations. ---


class MatrixError(Exception):
    """Base class for every error raised by mathq."""


class MatrixCalcError(MatrixError, ValueError):
    """Operands have incompatible shapes for the requested operation."""


class MatrixDimensionError(MatrixCalcError):
    """A matrix is neither a single row nor a single column."""


class MatrixRangeError(MatrixError, IndexError):
    """An index or crop range falls outside the matrix."""


class MatrixParseError(MatrixError, ValueError):
    """A matrix string does not follow the bracketed-row format."""
