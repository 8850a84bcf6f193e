"""
Matrix Arithmetic

Pure functions over immutable matrices: validation, multiplication and
generation of the multiply-accumulate steps for one output cell.
No state, no Qt.
"""

import math
from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np


class MatrixComputationError(ValueError):
    """Raised when two matrices are multiplied without a matching inner dimension."""


@dataclass(frozen=True, eq=False)
class Matrix:
    """
    Rectangular numeric grid.

    Backed by a read-only float64 array so that rows, cols and data can never
    disagree. Changes always produce a new Matrix.
    """
    data: np.ndarray

    def __post_init__(self):
        values = self.data
        if not isinstance(values, np.ndarray):
            lengths = {len(row) for row in values}
            if len(lengths) > 1:
                raise ValueError("Every matrix row must have the same number of columns")
        array = np.array(values, dtype=np.float64)
        if array.ndim != 2 or array.shape[0] < 1 or array.shape[1] < 1:
            raise ValueError(f"Matrix must be a non-empty 2D grid, got shape {array.shape}")
        array.setflags(write=False)
        object.__setattr__(self, "data", array)

    @property
    def rows(self) -> int:
        return self.data.shape[0]

    @property
    def cols(self) -> int:
        return self.data.shape[1]

    @property
    def shape(self) -> Tuple[int, int]:
        return self.data.shape

    def tolist(self):
        return self.data.tolist()

    def __eq__(self, other):
        if not isinstance(other, Matrix):
            return NotImplemented
        return np.array_equal(self.data, other.data)

    __hash__ = None

    def __repr__(self):
        return f"Matrix({self.rows}x{self.cols}, {self.tolist()})"


@dataclass(frozen=True)
class CellPosition:
    row: int
    col: int


@dataclass(frozen=True)
class Dimensions:
    """A is m×n, B is n×p, C is m×p."""
    m: int
    n: int
    p: int


@dataclass(frozen=True)
class ValidationResult:
    is_valid: bool
    error: Optional[str] = None


@dataclass(frozen=True)
class DotProductStep:
    """
    One multiply-accumulate contributing to result cell (i, j).

    partial_sum is the running sum over k' = 0..k; is_complete marks the
    last contraction index for the cell.
    """
    i: int
    j: int
    k: int
    a_value: float
    b_value: float
    product: float
    partial_sum: float
    is_complete: bool

    @property
    def cell(self) -> CellPosition:
        return CellPosition(self.i, self.j)


def create_matrix(rows: int, cols: int, fill: float = 0) -> Matrix:
    """Build a rows×cols matrix filled with `fill`."""
    if rows < 1 or cols < 1:
        raise ValueError(f"Matrix dimensions must be at least 1x1, got {rows}x{cols}")
    return Matrix(np.full((rows, cols), fill, dtype=np.float64))


def validate_multiplication(a: Matrix, b: Matrix) -> ValidationResult:
    """Check that A's column count matches B's row count."""
    if a.cols != b.rows:
        return ValidationResult(
            is_valid=False,
            error=(
                f"Cannot multiply {a.rows}×{a.cols} matrix with {b.rows}×{b.cols} matrix. "
                f"A's columns ({a.cols}) must equal B's rows ({b.rows})."
            ),
        )
    return ValidationResult(is_valid=True)


def dimensions_of(a: Matrix, b: Matrix) -> Dimensions:
    return Dimensions(m=a.rows, n=a.cols, p=b.cols)


def multiply_matrices(a: Matrix, b: Matrix) -> Matrix:
    """
    Multiply A by B.

    Callers are expected to validate first; an invalid pair raises
    MatrixComputationError with the validation message.
    """
    validation = validate_multiplication(a, b)
    if not validation.is_valid:
        raise MatrixComputationError(validation.error)
    return Matrix(np.matmul(a.data, b.data))


def generate_dot_product_steps(a: Matrix, b: Matrix, row: int, col: int) -> Tuple[DotProductStep, ...]:
    """Expand result cell (row, col) into its multiply-accumulate steps, k ascending."""
    steps = []
    partial_sum = 0.0
    last_k = a.cols - 1

    for k in range(a.cols):
        a_value = float(a.data[row, k])
        b_value = float(b.data[k, col])
        product = a_value * b_value
        partial_sum += product
        steps.append(DotProductStep(
            i=row,
            j=col,
            k=k,
            a_value=a_value,
            b_value=b_value,
            product=product,
            partial_sum=partial_sum,
            is_complete=(k == last_k),
        ))

    return tuple(steps)


def resize_matrix(matrix: Matrix, new_rows: int, new_cols: int) -> Matrix:
    """New matrix of the target size keeping the overlapping values; new cells are 0."""
    if new_rows < 1 or new_cols < 1:
        raise ValueError(f"Matrix dimensions must be at least 1x1, got {new_rows}x{new_cols}")
    resized = np.zeros((new_rows, new_cols), dtype=np.float64)
    keep_rows = min(matrix.rows, new_rows)
    keep_cols = min(matrix.cols, new_cols)
    resized[:keep_rows, :keep_cols] = matrix.data[:keep_rows, :keep_cols]
    return Matrix(resized)


def update_matrix_cell(matrix: Matrix, row: int, col: int, value: float) -> Matrix:
    """Copy of `matrix` with one cell replaced."""
    if not (0 <= row < matrix.rows and 0 <= col < matrix.cols):
        raise IndexError(f"Cell ({row}, {col}) is outside a {matrix.rows}x{matrix.cols} matrix")
    data = matrix.data.copy()
    data[row, col] = value
    return Matrix(data)


def parse_cell_value(value) -> Optional[float]:
    """
    Interpret user input for a cell.

    Returns None for anything that is not a finite number, so the edit can
    be discarded and the prior value kept.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number):
        return None
    return number
