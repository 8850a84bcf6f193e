"""
Step Sequencer

Expands a matrix pair into the full ordered list of multiply-accumulate
steps for the whole result matrix.

Order: i (result row) outer, j (result col) inner, k ascending within a cell.
"""

from dataclasses import dataclass
from typing import Callable, Optional, Tuple

from .matrix import (
    CellPosition,
    DotProductStep,
    Matrix,
    MatrixComputationError,
    generate_dot_product_steps,
    validate_multiplication,
)


@dataclass(frozen=True)
class ProgressUpdate:
    """Reported once per result cell while the sequence is generated."""
    current_cell: CellPosition
    completed_cells: int
    total_cells: int


ProgressCallback = Callable[[ProgressUpdate], None]


def generate_all_steps(
    a: Matrix,
    b: Matrix,
    on_progress: Optional[ProgressCallback] = None,
) -> Tuple[DotProductStep, ...]:
    """Concatenate the per-cell step sequences of A×B in row-major order."""
    validation = validate_multiplication(a, b)
    if not validation.is_valid:
        raise MatrixComputationError(validation.error)

    result_rows, result_cols = a.rows, b.cols
    total_cells = result_rows * result_cols
    if total_cells == 0:
        return ()

    steps = []
    completed_cells = 0
    for i in range(result_rows):
        for j in range(result_cols):
            steps.extend(generate_dot_product_steps(a, b, i, j))
            completed_cells += 1
            if on_progress is not None:
                on_progress(ProgressUpdate(
                    current_cell=CellPosition(i, j),
                    completed_cells=completed_cells,
                    total_cells=total_cells,
                ))

    return tuple(steps)


def completed_cells_at(steps: Tuple[DotProductStep, ...], pointer: int) -> int:
    """Number of cells whose final step sits at or before `pointer`."""
    if pointer < 0:
        return 0
    return sum(1 for step in steps[:pointer + 1] if step.is_complete)
